"""CareBook: patient and specialist contact manager with undo/redo history."""

__version__ = "1.0.0"
