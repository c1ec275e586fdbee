"""
Project workflows: ``estreui init`` and ``estreui update``.

Both copy assets from the installed estreui core package. ``init`` builds a
fresh project and copies everything; ``update`` refreshes an existing project
and never touches the paths in its ignore rules.
"""

import json
import shutil
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

from estreui.errors import AssetSyncError, CorePackageNotFoundError
from estreui.manifest.index_document import IndexDocumentPatcher
from estreui.manifest.service_worker import ManifestPatcher
from estreui.npm import NpmClient
from estreui.sync.ignore import IgnoreRuleSet
from estreui.sync.tree_sync import SyncReport, TreeSynchronizer
from estreui.utils.file_ops import safe_write_file
from estreui.utils.path_constants import (
    BUNDLED_LIBRARIES,
    CLI_PACKAGE_NAME,
    CORE_ASSET_DIRS,
    CORE_PACKAGE_NAME,
    CORE_ROOT_FILES,
    ESSENTIAL_ROOT_FILES,
    IGNORE_FILE,
)
from estreui.utils.paths import ProjectPaths, lib_script_path


class InitResult(BaseModel):
    project_root: Path
    core_root: Path
    package_json_created: bool = False
    libraries: list[str] = Field(default_factory=list)
    missing_libraries: list[str] = Field(default_factory=list)
    report: SyncReport = Field(default_factory=SyncReport)


def locate_core_package(
    project_root: Path, core_path: Path | None = None, npm: NpmClient | None = None
) -> Path:
    """Find the installed estreui core package.

    Looks in the project's node_modules, then the configured core path, then
    the global npm root.

    Raises:
        CorePackageNotFoundError: If none of the locations has the package
    """
    candidates = [ProjectPaths.for_root(project_root).package_dir(CORE_PACKAGE_NAME)]
    if core_path is not None:
        candidates.append(Path(core_path))
    for candidate in candidates:
        if candidate.is_dir():
            return candidate.resolve()

    if npm is not None:
        global_root = npm.global_root()
        if global_root is not None and (global_root / CORE_PACKAGE_NAME).is_dir():
            logger.info("Using global EstreUI package.")
            return (global_root / CORE_PACKAGE_NAME).resolve()

    raise CorePackageNotFoundError(
        f"Could not find the {CORE_PACKAGE_NAME} core package. "
        f"Run 'npm install {CORE_PACKAGE_NAME}' or set ESTREUI_CORE_PATH."
    )


def project_package_json(package_name: str) -> dict:
    """package.json content of a new project."""
    return {
        "name": package_name,
        "version": "1.0.0",
        "description": "EstreUI Project",
        "private": True,
        "scripts": {"dev": "estreui dev"},
        "dependencies": {CORE_PACKAGE_NAME: "^0.0.1"},
        "devDependencies": {CLI_PACKAGE_NAME: "^1.0.0"},
    }


def find_bundled_library(library: str, search_roots: list[Path]) -> Path | None:
    """Locate the file of a library estreui bundles, in node_modules-style roots."""
    relative = Path("dist", "jquery.js") if library == "jquery" else Path(f"{library}.js")
    for root in search_roots:
        candidate = root / library / relative
        if candidate.is_file():
            return candidate
    return None


def _copy(source: Path, destination: Path) -> None:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as e:
        raise AssetSyncError(f"Failed to copy {source.name}: {e}", path=str(destination)) from e


def install_bundled_libraries(paths: ProjectPaths, core_root: Path, result: InitResult) -> None:
    """Copy estreui's own libraries into scripts/lib and point the documents at them."""
    try:
        paths.lib_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AssetSyncError(f"Failed to create {paths.lib_dir}: {e}", path=str(paths.lib_dir)) from e
    index_patcher = IndexDocumentPatcher(paths.index_file)
    manifest_patcher = ManifestPatcher(paths.service_worker_file)
    document = index_patcher.read() if index_patcher.exists() else None
    manifest = manifest_patcher.read() if manifest_patcher.exists() else None

    for library in BUNDLED_LIBRARIES:
        destination = paths.lib_file(f"{library}.js")
        if not destination.exists():
            source = find_bundled_library(library, [paths.node_modules_dir])
            from_core = source is None
            if from_core:
                source = find_bundled_library(library, [core_root / "node_modules"])
            if source is None and (core_root / "scripts" / f"{library}.js").is_file():
                source = core_root / "scripts" / f"{library}.js"
            if source is None:
                logger.warning(f"Could not find library {library} to copy.")
                result.missing_libraries.append(library)
                continue
            _copy(source, destination)
            if from_core:
                redundant = paths.scripts_dir / f"{library}.js"
                if redundant.is_file():
                    try:
                        redundant.unlink()
                    except OSError as e:
                        raise AssetSyncError(f"Failed to remove {redundant.name}: {e}", path=str(redundant)) from e
        result.libraries.append(library)

        if document is not None and not document.relocate_script(library) and library == "jquery":
            document.replace_jquery_cdn(f"{library}.js")

    if manifest is not None:
        for library in BUNDLED_LIBRARIES:
            manifest.relocate_references(f"./scripts/{library}.js", lib_script_path(f"{library}.js"))

    if document is not None:
        index_patcher.write(document)
    if manifest is not None:
        manifest_patcher.write(manifest)


async def init_project(
    project_name: str,
    cwd: Path | None = None,
    core_path: Path | None = None,
    npm_executable: str = "npm",
    now: datetime | None = None,
) -> InitResult:
    """Create a new EstreUI project from the installed core package.

    Args:
        project_name: Directory to create; "." initializes the current directory
        cwd: Directory the project name is relative to
        core_path: Explicit core package location
        npm_executable: npm used to look up the global package root
        now: Clock used for the service worker version bump

    Raises:
        CorePackageNotFoundError: If the core package cannot be found
        AssetSyncError: If copying fails
    """
    cwd = Path(cwd or Path.cwd()).resolve()
    project_root = (cwd / project_name).resolve()
    paths = ProjectPaths.for_root(project_root)
    logger.info(f"Initializing project in {project_root}...")

    try:
        project_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AssetSyncError(f"Failed to create {project_root}: {e}", path=str(project_root)) from e

    package_json_created = False
    if paths.package_json.exists():
        logger.info("package.json already exists, keeping it")
    else:
        package_name = project_root.name
        content = json.dumps(project_package_json(package_name), indent=4)
        try:
            safe_write_file(paths.package_json, content)
        except OSError as e:
            raise AssetSyncError(f"Failed to write package.json: {e}", path=str(paths.package_json)) from e
        package_json_created = True
        logger.info("Created package.json")

    core_root = locate_core_package(project_root, core_path, NpmClient(project_root, npm_executable))
    logger.info(f"Copying core assets from {core_root}...")

    result = InitResult(project_root=project_root, core_root=core_root, package_json_created=package_json_created)
    synchronizer = TreeSynchronizer(IgnoreRuleSet.empty())
    result.report.merge(await synchronizer.sync_directories(core_root, project_root, CORE_ASSET_DIRS))
    result.report.merge(await synchronizer.sync_root_files(core_root, project_root, CORE_ROOT_FILES))

    install_bundled_libraries(paths, core_root, result)
    logger.info("Core assets and libraries copied and configured")

    result.report.merge(await synchronizer.sync_root_files(core_root, project_root, ESSENTIAL_ROOT_FILES))

    ManifestPatcher(paths.service_worker_file).bump_version(now)
    return result


async def update_project(
    project_root: Path,
    core_path: Path | None = None,
    npm_executable: str = "npm",
    ignore_file: str = IGNORE_FILE,
) -> SyncReport:
    """Refresh a project's assets from the installed core package.

    Raises:
        CorePackageNotFoundError: If the core package cannot be found
        AssetSyncError: If any copy fails; files copied before it stay
    """
    project_root = Path(project_root).resolve()
    core_root = locate_core_package(project_root, core_path, NpmClient(project_root, npm_executable))
    logger.info(f"Core package path: {core_root}")

    rules = IgnoreRuleSet.load(project_root, ignore_file)
    synchronizer = TreeSynchronizer(rules)

    report = await synchronizer.sync_directories(core_root, project_root, CORE_ASSET_DIRS)
    try:
        html_files = sorted(entry.name for entry in core_root.iterdir() if entry.is_file() and entry.suffix == ".html")
    except OSError as e:
        raise AssetSyncError(f"Failed to list {core_root}: {e}", path=str(core_root)) from e
    report.merge(await synchronizer.sync_root_files(core_root, project_root, html_files))
    return report
