"""
Persistence Module.
The content directory is the system of record; there is no database.
"""
from .content_store import ContentStore, atomic_destination, get_content_store

__all__ = [
    "ContentStore",
    "atomic_destination",
    "get_content_store",
]
