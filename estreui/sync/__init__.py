"""
Asset synchronization package for mirroring core package trees into a project.
"""

from .ignore import IgnoreRuleSet
from .tree_sync import SyncReport, TreeSynchronizer

__all__ = ['IgnoreRuleSet', 'SyncReport', 'TreeSynchronizer']
