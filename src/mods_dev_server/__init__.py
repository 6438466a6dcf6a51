"""Local development server for previewing mod bundles."""

__version__ = "0.1.0"
