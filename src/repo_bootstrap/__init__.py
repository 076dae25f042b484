"""Configure a new GitHub repository through the gh CLI."""

__version__ = "0.1.0"
