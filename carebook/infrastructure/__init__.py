"""Infrastructure layer for CareBook: configuration, settings and logging."""
