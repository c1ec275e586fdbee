"""
Library Resolution
==================

Finds the browser-usable entry file of an installed npm package so it can be
copied into ``scripts/lib``. Resolution never raises: an unresolvable package
yields a ``LibraryNotFound`` result and the caller decides what to do.
"""

import json
from pathlib import Path, PurePosixPath

from loguru import logger
from pydantic import BaseModel, Field

from estreui.utils.path_constants import PACKAGE_JSON_FILE

GENERIC_ENTRY_NAMES = frozenset({"index.js"})


class LibrarySpec(BaseModel):
    """A resolved library entry file and the name it gets inside scripts/lib."""

    name: str = Field(..., description="npm package name")
    resolved_entry_path: Path = Field(..., description="Absolute path of the entry file")
    dest_file_name: str = Field(..., description="File name inside scripts/lib")

    def __str__(self) -> str:
        return f"{self.name} -> {self.dest_file_name}"


class LibraryNotFound(BaseModel):
    """Resolution failed; lists every candidate that was tried."""

    name: str
    package_root: Path
    tried: list[str] = Field(default_factory=list)
    reason: str = "No entry file found"

    def __str__(self) -> str:
        return f"{self.name}: {self.reason}"


def short_name(package_name: str) -> str:
    """Drop the npm scope: "@scope/pkg" -> "pkg"."""
    return package_name.rsplit("/", 1)[-1]


def dest_file_name(entry_path: str | Path, package_name: str) -> str:
    """Name of the copied entry file: its basename, or <name>.js for a generic index.js."""
    basename = Path(entry_path).name
    if basename in GENERIC_ENTRY_NAMES:
        return f"{short_name(package_name)}.js"
    return basename


def fallback_candidates(package_name: str) -> list[str]:
    """Conventional entry locations tried when the declared entry is missing."""
    name = short_name(package_name)
    return [
        f"dist/{name}.js",
        f"dist/{name}.min.js",
        f"{name}.js",
        f"lib/{name}.js",
    ]


class LibraryResolver:
    """Resolves package entry files inside a node_modules directory."""

    def __init__(self, node_modules_dir: Path | None = None):
        self.node_modules_dir = node_modules_dir

    def package_root(self, package_name: str) -> Path:
        if self.node_modules_dir is None:
            raise ValueError("LibraryResolver has no node_modules directory")
        return self.node_modules_dir / package_name

    def read_manifest(self, package_root: Path) -> dict:
        """Read package.json, returning {} when it is missing or invalid."""
        manifest_path = package_root / PACKAGE_JSON_FILE
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {manifest_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def declared_entry(self, package_name: str, manifest: dict) -> str:
        """The browser field, else the main field, else dist/<name>.js."""
        for field in ("browser", "main"):
            value = manifest.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return f"dist/{short_name(package_name)}.js"

    def resolve(self, package_name: str, package_root: Path | None = None) -> LibrarySpec | LibraryNotFound:
        """Resolve the entry file of an installed package.

        Args:
            package_name: npm package name
            package_root: Installed package directory; defaults to
                node_modules/<package_name>

        Returns:
            LibrarySpec | LibraryNotFound: The resolved entry, or why none was found
        """
        if package_root is None:
            package_root = self.package_root(package_name)
        package_root = Path(package_root)

        if not package_root.is_dir():
            return LibraryNotFound(
                name=package_name,
                package_root=package_root,
                reason=f"Package {package_name} is not installed at {package_root}",
            )

        declared = self.declared_entry(package_name, self.read_manifest(package_root))
        candidates = [declared]
        if not PurePosixPath(declared).suffix:
            candidates.append(f"{declared}.js")
        candidates.extend(path for path in fallback_candidates(package_name) if path not in candidates)

        for candidate in candidates:
            entry_path = (package_root / candidate).resolve()
            if entry_path.is_file():
                logger.debug(f"Resolved {package_name} entry to {entry_path}")
                return LibrarySpec(
                    name=package_name,
                    resolved_entry_path=entry_path,
                    dest_file_name=dest_file_name(entry_path, package_name),
                )

        return LibraryNotFound(name=package_name, package_root=package_root, tried=candidates)
