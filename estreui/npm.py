"""npm operations for EstreUI projects."""
import subprocess
from pathlib import Path

from loguru import logger

from estreui.errors import PackageManagerError


class NpmClient:
    """Runs npm commands inside a project directory."""

    def __init__(self, project_root: str | Path, executable: str = "npm"):
        self.project_root = Path(project_root).resolve()
        self.executable = executable

    def _run(self, command: list[str]) -> str:
        """Run an npm command and return its stdout."""
        full_command = [self.executable] + command
        logger.debug(f"Running npm command: {' '.join(full_command)}")
        try:
            result = subprocess.run(
                full_command,
                cwd=self.project_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise PackageManagerError(f"{self.executable} executable not found; is Node.js installed?") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            logger.error(f"npm command failed: {' '.join(command)}")
            raise PackageManagerError(
                f"npm {' '.join(command)} failed: {stderr or f'exit status {e.returncode}'}",
                stderr=stderr,
            ) from e
        if result.stderr.strip():
            logger.debug(f"npm stderr: {result.stderr.strip()}")
        return result.stdout.strip()

    def install(self, package_name: str) -> None:
        """Install a package into the project's node_modules."""
        logger.info(f"Installing {package_name}...")
        self._run(["install", package_name])

    def uninstall(self, package_name: str) -> None:
        """Uninstall a package from the project."""
        logger.info(f"Uninstalling {package_name}...")
        self._run(["uninstall", package_name])

    def global_root(self) -> Path | None:
        """Location of globally installed packages, or None if npm cannot tell."""
        try:
            output = self._run(["root", "-g"])
        except PackageManagerError as e:
            logger.debug(f"Could not determine global npm root: {e.message}")
            return None
        return Path(output) if output else None
