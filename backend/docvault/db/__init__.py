"""MongoDB and GridFS connection handling."""
