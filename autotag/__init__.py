"""autotag: tag a repository whenever its declared version changes."""

__version__ = "0.3.0"
