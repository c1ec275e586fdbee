"""
Utility helpers shared by the EstreUI CLI.
"""

from estreui.utils.file_ops import safe_read_file, safe_write_file
from estreui.utils.paths import ProjectPaths, lib_script_path

__all__ = ["ProjectPaths", "lib_script_path", "safe_read_file", "safe_write_file"]
