"""Service wiring and request dependencies for the API layer."""
