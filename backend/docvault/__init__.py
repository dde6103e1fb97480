"""DocVault backend: compressed PDF storage with role-based access."""
