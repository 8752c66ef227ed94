"""create-modern-app: scaffold a new project from a remote template."""

__version__ = "1.0.0"
