"""
Third-party front-end library handling: entry resolution and add/remove.
"""

from .manager import LibraryChange, LibraryManager
from .resolver import LibraryNotFound, LibraryResolver, LibrarySpec, dest_file_name

__all__ = [
    'LibraryChange',
    'LibraryManager',
    'LibraryNotFound',
    'LibraryResolver',
    'LibrarySpec',
    'dest_file_name',
]
