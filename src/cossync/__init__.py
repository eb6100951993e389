"""cossync - Folder synchronization for the object storage files API."""

__version__ = "0.1.0"
