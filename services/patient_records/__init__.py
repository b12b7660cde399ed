"""Patient records CRUD service."""
