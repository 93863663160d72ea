"""Core business logic: models, catalog, services and generators."""
