"""
Unit tests for the category service.
"""

import pytest
from bson import ObjectId

from docvault.core.exceptions import ConflictError, NotFoundError, ValidationError
from docvault.services.category_service import CategoryService, slugify


@pytest.fixture
def category_service(mongo_db) -> CategoryService:
    return CategoryService(mongo_db)


class TestSlugify:
    """Tests for slug derivation."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Data Structures", "data-structures"),
            ("  data structures!! ", "data-structures"),
            ("Operating_Systems -- Notes", "operating-systems-notes"),
            ("---Math---", "math"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, name, expected):
        assert slugify(name) == expected


class TestCategoryService:
    """Tests for CategoryService CRUD."""

    def test_create(self, category_service):
        category = category_service.create("Data Structures", "Trees and graphs")

        assert category.name == "Data Structures"
        assert category.slug == "data-structures"
        assert category.description == "Trees and graphs"

    def test_duplicate_slug_conflicts(self, category_service):
        category_service.create("Data Structures")

        with pytest.raises(ConflictError) as exc_info:
            category_service.create("data structures!!")
        assert exc_info.value.detail == "Category with this name already exists"

    @pytest.mark.parametrize("name", ["", "   ", "!!!"])
    def test_invalid_names(self, category_service, name):
        with pytest.raises(ValidationError):
            category_service.create(name)

    def test_rename_rederives_slug(self, category_service):
        category = category_service.create("Algorithms")

        updated = category_service.update(category.id, name="Advanced Algorithms")

        assert updated.slug == "advanced-algorithms"
        assert updated.name == "Advanced Algorithms"

    def test_rename_to_own_slug_allowed(self, category_service):
        category = category_service.create("Algorithms")

        updated = category_service.update(category.id, name="ALGORITHMS")

        assert updated.slug == "algorithms"

    def test_rename_to_taken_slug_conflicts(self, category_service):
        category_service.create("Algorithms")
        other = category_service.create("Networks")

        with pytest.raises(ConflictError):
            category_service.update(other.id, name="algorithms")

    def test_update_description_only(self, category_service):
        category = category_service.create("Networks")

        updated = category_service.update(category.id, description="TCP/IP")

        assert updated.slug == "networks"
        assert updated.description == "TCP/IP"

    def test_update_unknown(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.update(str(ObjectId()), name="Anything")
        with pytest.raises(NotFoundError):
            category_service.update("bogus", name="Anything")

    def test_delete(self, category_service):
        category = category_service.create("Networks")

        assert category_service.delete(category.id) is True
        assert category_service.delete(category.id) is False
        assert category_service.delete("bogus") is False

    def test_list_sorted_by_name(self, category_service):
        for name in ["Networks", "Algorithms", "Databases"]:
            category_service.create(name)

        names = [c.name for c in category_service.list_categories()]

        assert names == ["Algorithms", "Databases", "Networks"]
