"""
EstreUI CLI - project scaffolding and maintenance for EstreUI apps
"""

__version__ = "0.1.0"

from estreui.cli import cli
from estreui.errors import EstreUIError
from estreui.library import LibraryManager, LibraryResolver
from estreui.manifest import IndexDocumentPatcher, ManifestPatcher
from estreui.sync import IgnoreRuleSet, TreeSynchronizer

__all__ = [
    "cli",
    "EstreUIError",
    "IgnoreRuleSet",
    "IndexDocumentPatcher",
    "LibraryManager",
    "LibraryResolver",
    "ManifestPatcher",
    "TreeSynchronizer",
]
