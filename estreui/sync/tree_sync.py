"""
Tree Synchronization Module
===========================

This module mirrors the asset trees of the estreui core package into a user
project. Every non-ignored file is copied over its destination without any
timestamp or content comparison, so customizations must live under ignored
paths. Files that only exist in the project are never deleted.
"""

import asyncio
import os
import shutil
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

from estreui.errors import AssetSyncError
from estreui.sync.ignore import IgnoreRuleSet


class SyncReport(BaseModel):
    """What a sync run did, in relative paths."""

    copied: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    created_dirs: list[str] = Field(default_factory=list)

    def merge(self, other: "SyncReport") -> None:
        self.copied.extend(other.copied)
        self.skipped.extend(other.skipped)
        self.missing.extend(other.missing)
        self.created_dirs.extend(other.created_dirs)


class TreeSynchronizer:
    """Copies core asset trees into a project, honouring an IgnoreRuleSet."""

    def __init__(self, ignore_rules: IgnoreRuleSet | None = None):
        """Initialize the TreeSynchronizer.

        Args:
            ignore_rules: Paths that must never be created or overwritten
        """
        self.ignore_rules = ignore_rules or IgnoreRuleSet.empty()
        self.report = SyncReport()
        self._errors: dict[str, str] = {}
        self._last_sync: datetime | None = None
        self._lock = asyncio.Lock()

    async def sync(self, source_dir: Path, dest_dir: Path, relative_base: str) -> SyncReport:
        """Recursively copy source_dir into dest_dir.

        Args:
            source_dir: Directory to copy from
            dest_dir: Directory to copy into
            relative_base: Relative path of source_dir inside the project, used
                for ignore matching (e.g. "scripts")

        Returns:
            SyncReport: What this call copied and skipped

        Raises:
            AssetSyncError: If reading, creating or copying fails. Files copied
                before the failure are left in place.
        """
        async with self._lock:
            report = SyncReport()
            await self._sync_tree(Path(source_dir), Path(dest_dir), relative_base.strip("/"), report)
            self._finish(report)
            return report

    async def sync_directories(
        self, core_root: Path, project_root: Path, names: Iterable[str]
    ) -> SyncReport:
        """Sync top-level asset directories of the core package into the project.

        A directory listed as ``name/`` in the ignore rules is skipped whole; a
        directory missing from the core package is reported and skipped.
        """
        report = SyncReport()
        for name in names:
            source = Path(core_root) / name
            if not source.is_dir():
                logger.warning(f"Core asset directory {name} not found, skipping")
                report.missing.append(name)
                continue
            if self.ignore_rules.contains_directory(name):
                logger.info(f"Skipping directory {name} (ignored)")
                report.skipped.append(f"{name}/")
                continue
            logger.info(f"Processing {name}...")
            report.merge(await self.sync(source, Path(project_root) / name, name))
        return report

    async def sync_root_files(
        self, core_root: Path, project_root: Path, names: Iterable[str]
    ) -> SyncReport:
        """Copy individual files from the core package root into the project root."""
        async with self._lock:
            report = SyncReport()
            for name in names:
                source = Path(core_root) / name
                if not source.exists():
                    report.missing.append(name)
                    continue
                if self.ignore_rules.contains(name):
                    logger.info(f"Skipping {name} (ignored)")
                    report.skipped.append(name)
                    continue
                destination = Path(project_root) / name
                if source.is_dir():
                    await self._sync_tree(source, destination, name, report)
                else:
                    await self._copy_file(source, destination, name, report)
            self._finish(report)
            return report

    async def _sync_tree(self, source_dir: Path, dest_dir: Path, relative_base: str, report: SyncReport) -> None:
        try:
            if not dest_dir.is_dir():
                await asyncio.to_thread(dest_dir.mkdir, parents=True, exist_ok=True)
                report.created_dirs.append(relative_base)
            entries = sorted(os.scandir(source_dir), key=lambda entry: entry.name)
        except OSError as e:
            raise self._sync_error(relative_base, e) from e

        for entry in entries:
            relative_path = f"{relative_base}/{entry.name}" if relative_base else entry.name
            if self.ignore_rules.contains(relative_path):
                logger.debug(f"Skipping {relative_path} (ignored)")
                report.skipped.append(relative_path)
                continue

            if entry.is_dir():
                await self._sync_tree(Path(entry.path), dest_dir / entry.name, relative_path, report)
            else:
                await self._copy_file(Path(entry.path), dest_dir / entry.name, relative_path, report)

    async def _copy_file(self, source: Path, destination: Path, relative_path: str, report: SyncReport) -> None:
        try:
            await asyncio.to_thread(destination.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.copyfile, source, destination)
        except OSError as e:
            raise self._sync_error(relative_path, e) from e
        report.copied.append(relative_path)

    def _sync_error(self, relative_path: str, error: OSError) -> AssetSyncError:
        self._errors[relative_path] = str(error)
        logger.error(f"Failed to sync {relative_path}: {error}")
        return AssetSyncError(f"Failed to sync {relative_path}: {error}", path=relative_path)

    def _finish(self, report: SyncReport) -> None:
        self.report.merge(report)
        self._last_sync = datetime.now()

    def get_status(self) -> dict:
        """Get the current status of the synchronizer.

        Returns:
            dict: Counts of copied and skipped paths, errors and last sync time
        """
        return {
            "copied": len(self.report.copied),
            "skipped": len(self.report.skipped),
            "errors": dict(self._errors),
            "last_sync": self._last_sync.isoformat() if self._last_sync else None,
        }
