"""
Library Management
==================

``estreui add`` and ``estreui remove``: keeps ``scripts/lib``, the script tags
in ``index.html`` and the cache list in ``serviceWorker.js`` consistent with
each other. Both documents are patched in memory first and written only after
every edit succeeded.
"""

import shutil
from datetime import datetime

from loguru import logger
from pydantic import BaseModel, Field

from estreui.errors import AssetSyncError
from estreui.library.resolver import LibraryNotFound, LibraryResolver, LibrarySpec, short_name
from estreui.manifest.index_document import IndexDocument, IndexDocumentPatcher
from estreui.manifest.service_worker import ManifestPatcher, ServiceWorkerManifest
from estreui.npm import NpmClient
from estreui.utils.paths import ProjectPaths, lib_script_path


class LibraryChange(BaseModel):
    """Outcome of an add or remove."""

    package: str
    library: LibrarySpec | None = None
    not_found: LibraryNotFound | None = None
    files: list[str] = Field(default_factory=list)
    index_updated: bool = False
    manifest_updated: bool = False


class LibraryManager:
    """Adds and removes third-party front-end libraries in a project."""

    def __init__(self, paths: ProjectPaths, npm: NpmClient | None = None, resolver: LibraryResolver | None = None):
        self.paths = paths
        self.npm = npm or NpmClient(paths.root_dir)
        self.resolver = resolver or LibraryResolver(paths.node_modules_dir)
        self.index_patcher = IndexDocumentPatcher(paths.index_file)
        self.manifest_patcher = ManifestPatcher(paths.service_worker_file)

    def add(self, package_name: str, install: bool = True, now: datetime | None = None) -> LibraryChange:
        """Install a package and wire its entry file into the project.

        Raises:
            PackageManagerError: If npm install fails
            AssetSyncError: If copying or writing project files fails
        """
        if install:
            self.npm.install(package_name)

        change = LibraryChange(package=package_name)
        resolution = self.resolver.resolve(package_name, self.paths.package_dir(package_name))
        if isinstance(resolution, LibraryNotFound):
            logger.warning(f"Could not automatically find the main JS file for {package_name}.")
            logger.warning("Please manually copy the file to scripts/lib and add to index.html.")
            change.not_found = resolution
            return change

        change.library = resolution
        destination = self.paths.lib_file(resolution.dest_file_name)
        try:
            self.paths.lib_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(resolution.resolved_entry_path, destination)
        except OSError as e:
            raise AssetSyncError(f"Failed to copy {resolution.dest_file_name}: {e}", path=str(destination)) from e
        change.files.append(resolution.dest_file_name)
        logger.info(f"Copied {resolution.dest_file_name} to scripts/lib/")

        self._patch_documents(
            change,
            lambda document: document.add_script_reference(resolution.dest_file_name),
            lambda manifest: manifest.add_entry(lib_script_path(resolution.dest_file_name)),
            now,
        )
        return change

    def remove(self, package_name: str, uninstall: bool = True, now: datetime | None = None) -> LibraryChange:
        """Uninstall a package and remove its copied files and references.

        Raises:
            PackageManagerError: If npm uninstall fails
            AssetSyncError: If deleting or writing project files fails
        """
        # Resolve while the package is still installed, the entry may be named by its manifest
        candidates = self.candidate_files(package_name)
        resolution = self.resolver.resolve(package_name, self.paths.package_dir(package_name))
        if isinstance(resolution, LibrarySpec) and resolution.dest_file_name not in candidates:
            candidates.append(resolution.dest_file_name)

        if uninstall:
            self.npm.uninstall(package_name)

        change = LibraryChange(package=package_name)
        for file_name in candidates:
            lib_file = self.paths.lib_file(file_name)
            if lib_file.is_file():
                try:
                    lib_file.unlink()
                except OSError as e:
                    raise AssetSyncError(f"Failed to remove {file_name}: {e}", path=str(lib_file)) from e
                change.files.append(file_name)
                logger.info(f"Removed {file_name} from scripts/lib/")

        def remove_tags(document: IndexDocument) -> bool:
            return any([document.remove_script_reference(file_name) for file_name in candidates])

        def remove_entries(manifest: ServiceWorkerManifest) -> bool:
            return any([manifest.remove_entry(lib_script_path(file_name)) for file_name in candidates])

        self._patch_documents(change, remove_tags, remove_entries, now)
        return change

    def candidate_files(self, package_name: str) -> list[str]:
        """Files in scripts/lib that belong to a package."""
        name = short_name(package_name)
        return [f"{name}.js", f"{name}.min.js"]

    def _patch_documents(self, change: LibraryChange, patch_index, patch_manifest, now: datetime | None) -> None:
        document = self.index_patcher.read()
        manifest = self.manifest_patcher.read()

        if document is not None:
            change.index_updated = patch_index(document)
        if manifest is not None:
            change.manifest_updated = patch_manifest(manifest)
            if change.manifest_updated or change.index_updated or change.files:
                change.manifest_updated = manifest.bump_version(now) or change.manifest_updated

        if change.index_updated:
            self.index_patcher.write(document)
        if change.manifest_updated:
            self.manifest_patcher.write(manifest)
