"""File operation utilities."""
import contextlib
import os
import tempfile
from pathlib import Path

from loguru import logger


def safe_write_file(file_path: Path, content: str) -> None:
    """
    Safely write content to a file using a temporary file to ensure atomic writes.

    Line endings are written exactly as given.

    Args:
        file_path: Path to the target file
        content: Content to write to the file
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create a temporary file in the same directory
    temp_fd, temp_path = tempfile.mkstemp(dir=str(file_path.parent), prefix=f".{file_path.name}.")
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)

        # On Windows, we need to remove the target file first
        if os.name == "nt" and file_path.exists():
            file_path.unlink()

        # Rename temporary file to target file (atomic on Unix)
        Path(temp_path).replace(file_path)
    except Exception:
        # Clean up temp file if something goes wrong
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise


def safe_read_file(file_path: Path) -> str:
    """
    Read a text file without translating its line endings.

    Args:
        file_path: Path to the file to read

    Returns:
        The content of the file as a string

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    try:
        with Path(file_path).open(encoding="utf-8", newline="") as f:
            return f.read()
    except Exception:
        logger.exception("Error reading file {}", file_path)
        raise
