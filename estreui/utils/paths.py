from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from estreui.utils.path_constants import (
    DIRECTORIES,
    INDEX_FILE,
    LIB_SCRIPT_PREFIX,
    PACKAGE_JSON_FILE,
    SERVICE_WORKER_FILE,
)


class ProjectPaths(BaseModel):
    """Paths of an EstreUI project, all derived from its root directory."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path = Field(default_factory=lambda: Path.cwd())

    @classmethod
    def for_root(cls, root_dir: str | Path) -> "ProjectPaths":
        """Build the paths for the project rooted at root_dir."""
        return cls(root_dir=Path(root_dir).resolve())

    @property
    def scripts_dir(self) -> Path:
        return self.root_dir / DIRECTORIES["scripts"]

    @property
    def lib_dir(self) -> Path:
        return self.root_dir / DIRECTORIES["lib"]

    @property
    def node_modules_dir(self) -> Path:
        return self.root_dir / DIRECTORIES["node_modules"]

    @property
    def index_file(self) -> Path:
        return self.root_dir / INDEX_FILE

    @property
    def service_worker_file(self) -> Path:
        return self.root_dir / SERVICE_WORKER_FILE

    @property
    def package_json(self) -> Path:
        return self.root_dir / PACKAGE_JSON_FILE

    def package_dir(self, package_name: str) -> Path:
        """Get the installed location of an npm package inside the project."""
        return self.node_modules_dir / package_name

    def lib_file(self, file_name: str) -> Path:
        """Get the path of a library file inside scripts/lib."""
        return self.lib_dir / file_name


def lib_script_path(file_name: str) -> str:
    """Path of a lib file as referenced from index.html and the cache list."""
    return f"{LIB_SCRIPT_PREFIX}{file_name}"
