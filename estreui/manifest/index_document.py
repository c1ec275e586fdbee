"""
Index Document Patching
=======================

Adds and removes ``<script>`` tags for copied libraries in a project's
``index.html``. New tags go on their own line right before the project's main
script tag, or before ``</body>`` when there is no main script tag.
"""

import re
from pathlib import Path

from loguru import logger

from estreui.errors import AssetSyncError
from estreui.utils.file_ops import safe_read_file, safe_write_file
from estreui.utils.path_constants import MAIN_SCRIPT_SRC
from estreui.utils.paths import lib_script_path

BODY_CLOSE_PATTERN = re.compile(r"</body\s*>", re.IGNORECASE)
JQUERY_CDN_PATTERN = re.compile(
    r"<script\b[^>]*\bsrc\s*=\s*[\"']https://code\.jquery\.com/jquery[^\"']*[\"'][^>]*>\s*</script\s*>",
    re.IGNORECASE,
)

TAG_INDENT = "    "


def script_tag(src: str) -> str:
    """Canonical script tag for a project script."""
    return f'<script defer type="text/javascript" src="{src}"></script>'


def script_tag_pattern(src: str) -> re.Pattern:
    """Match a complete script tag with the given src, in any attribute order."""
    return re.compile(
        r"<script\b[^>]*?(?<![\w-])src\s*=\s*(?P<quote>[\"'])" + re.escape(src) + r"(?P=quote)[^>]*>\s*</script\s*>",
        re.IGNORECASE,
    )


class IndexDocument:
    """In-memory index.html text; operations return True when the text changed."""

    def __init__(self, text: str):
        self.text = text

    @property
    def newline(self) -> str:
        return "\r\n" if "\r\n" in self.text else "\n"

    def _line_start(self, position: int) -> int:
        return self.text.rfind("\n", 0, position) + 1

    def has_script(self, src: str) -> bool:
        return script_tag_pattern(src).search(self.text) is not None

    def add_script_reference(self, dest_file_name: str) -> bool:
        """Insert the tag for scripts/lib/<dest_file_name> unless it is already there."""
        src = lib_script_path(dest_file_name)
        if self.has_script(src):
            logger.info("Script tag already exists in index.html")
            return False
        tag = script_tag(src)

        anchor = script_tag_pattern(MAIN_SCRIPT_SRC).search(self.text)
        if anchor:
            position = anchor.start()
            indent = self.text[self._line_start(position) : position]
            insertion = f"{tag}{self.newline}{indent}" if indent.strip() == "" else tag
            self.text = self.text[:position] + insertion + self.text[position:]
            logger.info("Injected script tag into index.html")
            return True

        body_matches = list(BODY_CLOSE_PATTERN.finditer(self.text))
        if not body_matches:
            logger.warning("index.html has neither the main script tag nor </body>, script tag not added")
            return False
        position = body_matches[-1].start()
        line_start = self._line_start(position)
        indent = self.text[line_start:position]
        if indent.strip() == "":
            insertion = f"{indent}{TAG_INDENT}{tag}{self.newline}"
            position = line_start
        else:
            insertion = tag
        self.text = self.text[:position] + insertion + self.text[position:]
        logger.info("Injected script tag into index.html")
        return True

    def remove_script_reference(self, dest_file_name: str) -> bool:
        """Remove every script tag whose src is scripts/lib/<dest_file_name>."""
        matches = list(script_tag_pattern(lib_script_path(dest_file_name)).finditer(self.text))
        if not matches:
            return False
        text = self.text
        for match in reversed(matches):
            start, end = match.start(), match.end()
            line_start = text.rfind("\n", 0, start) + 1
            line_end = text.find("\n", end)
            line_end = len(text) if line_end == -1 else line_end + 1
            if text[line_start:start].strip() == "" and text[end:line_end].strip() == "":
                start, end = line_start, line_end
            else:
                end += len(re.match(r"[ \t]*", text[end:]).group(0))
            text = text[:start] + text[end:]
        self.text = text
        logger.info("Removed script tag from index.html")
        return True

    def relocate_script(self, library: str) -> bool:
        """Point ./scripts/<library>.js references at ./scripts/lib/<library>.js."""
        old_src = f"./scripts/{library}.js"
        new_src = lib_script_path(f"{library}.js")
        updated = re.sub(
            r"([\"'])" + re.escape(old_src) + r"\1",
            lambda found: f"{found.group(1)}{new_src}{found.group(1)}",
            self.text,
        )
        if updated == self.text:
            return False
        self.text = updated
        return True

    def replace_jquery_cdn(self, dest_file_name: str = "jquery.js") -> bool:
        """Swap a code.jquery.com script tag for the local copy in scripts/lib."""
        match = JQUERY_CDN_PATTERN.search(self.text)
        if match is None:
            return False
        src = lib_script_path(dest_file_name)
        replacement = "" if self.has_script(src) else script_tag(src)
        self.text = self.text[: match.start()] + replacement + self.text[match.end() :]
        return True


class IndexDocumentPatcher:
    """Read-modify-write access to a project's index.html."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> IndexDocument | None:
        if not self.exists():
            logger.warning(f"{self.path.name} not found, skipping script tag update")
            return None
        try:
            return IndexDocument(safe_read_file(self.path))
        except (OSError, UnicodeDecodeError) as e:
            raise AssetSyncError(f"Failed to read {self.path}: {e}", path=str(self.path)) from e

    def write(self, document: IndexDocument) -> None:
        try:
            safe_write_file(self.path, document.text)
        except OSError as e:
            raise AssetSyncError(f"Failed to write {self.path}: {e}", path=str(self.path)) from e

    def add_script_reference(self, dest_file_name: str) -> bool:
        document = self.read()
        if document is None or not document.add_script_reference(dest_file_name):
            return False
        self.write(document)
        return True

    def remove_script_reference(self, dest_file_name: str) -> bool:
        document = self.read()
        if document is None or not document.remove_script_reference(dest_file_name):
            return False
        self.write(document)
        return True
