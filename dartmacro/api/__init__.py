"""Panel API: CRUD per macro kind, preview and settings."""
