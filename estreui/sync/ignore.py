"""
Ignore Rules
============

Paths that ``estreui update`` must never touch. The set is the built-in
default list plus the lines of the project's ``.estreuiignore`` file.

Matching is exact string comparison on forward-slash relative paths; there is
no glob syntax. An entry ending in ``/`` names a top-level asset directory and
skips that whole directory. A directory cannot be partially synced.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger

from estreui.errors import AssetSyncError
from estreui.utils.path_constants import DEFAULT_IGNORES, IGNORE_FILE


def normalize_relative_path(path: str) -> str:
    """Normalize a relative path for ignore matching."""
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def parse_ignore_lines(text: str) -> list[str]:
    """Parse ignore file content, skipping blank lines and # comments."""
    entries = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            entries.append(normalize_relative_path(stripped))
    return entries


class IgnoreRuleSet:
    """Immutable set of relative paths a sync must skip."""

    def __init__(self, paths: Iterable[str] = ()):
        self._paths = frozenset(normalize_relative_path(path) for path in paths if path.strip())

    @classmethod
    def load(
        cls,
        project_root: str | Path,
        ignore_file: str = IGNORE_FILE,
        defaults: Iterable[str] = DEFAULT_IGNORES,
    ) -> "IgnoreRuleSet":
        """Build the rule set from the defaults and the project's ignore file.

        Args:
            project_root: Root of the user project
            ignore_file: Name of the ignore file inside the project root
            defaults: Paths that are always ignored

        Returns:
            IgnoreRuleSet: Union of the defaults and the file's entries
        """
        paths = list(defaults)
        ignore_path = Path(project_root) / ignore_file
        if ignore_path.is_file():
            try:
                content = ignore_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise AssetSyncError(f"Failed to read {ignore_path}: {e}", path=str(ignore_path)) from e
            user_paths = parse_ignore_lines(content)
            logger.debug(f"Loaded {len(user_paths)} ignore entries from {ignore_path}")
            paths.extend(user_paths)
        return cls(paths)

    @classmethod
    def empty(cls) -> "IgnoreRuleSet":
        """A rule set that ignores nothing, used for fresh projects."""
        return cls()

    def contains(self, relative_path: str) -> bool:
        """Check whether a relative path is ignored (exact match)."""
        return normalize_relative_path(relative_path) in self._paths

    def contains_directory(self, name: str) -> bool:
        """Check whether a top-level directory is ignored as ``name/``."""
        return self.contains(name.rstrip("/") + "/")

    def __contains__(self, relative_path: object) -> bool:
        return isinstance(relative_path, str) and self.contains(relative_path)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"IgnoreRuleSet({sorted(self._paths)!r})"
