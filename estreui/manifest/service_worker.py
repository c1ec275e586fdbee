"""
Service Worker Manifest
=======================

Idempotent edits to a project's ``serviceWorker.js``. Two declarations are
recognized and nothing else::

    const INSTALLATION_VERSION_NAME = "1.0.0.RC3-r202511261200";
    const COMMON_FILES_TO_CACHE = [
        "./scripts/lib/jquery.js",
    ];

The declarations are read into a ``ManifestRecord`` and every edit rewrites
only the span of the matched declaration, so the rest of the file is kept
byte for byte. A declaration of any other shape makes the edit a no-op.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

from estreui.errors import AssetSyncError, FormatMismatchError
from estreui.utils.file_ops import safe_read_file, safe_write_file

VERSION_IDENTIFIER = "INSTALLATION_VERSION_NAME"
CACHE_LIST_IDENTIFIER = "COMMON_FILES_TO_CACHE"

VERSION_PATTERN = re.compile(
    r"(?P<head>\bconst\s+" + VERSION_IDENTIFIER + r"\s*=\s*)(?P<quote>[\"'])(?P<value>[^\"'\r\n]*)(?P=quote)"
)
CACHE_LIST_PATTERN = re.compile(
    r"(?P<head>\bconst\s+" + CACHE_LIST_IDENTIFIER + r"\s*=\s*\[)(?P<body>[^\]]*)(?P<tail>\])"
)
ENTRY_PATTERN = re.compile(r"\"(?P<double>[^\"\\\r\n]*)\"|'(?P<single>[^'\\\r\n]*)'")
REVISION_PATTERN = re.compile(r"-r\d+[a-z0-9]*$")

DEFAULT_INDENT = "    "


def normalize_cache_path(path: str) -> str:
    """Normalize a project path to the ./relative form used in the cache list."""
    normalized = path.strip().replace("\\", "/")
    if normalized.startswith("./"):
        return normalized
    return "./" + normalized.lstrip("/")


def revision_suffix(now: datetime | None = None) -> str:
    """Version suffix -rYYYYMMDDHHMM, in local time."""
    now = now or datetime.now()
    return now.strftime("-r%Y%m%d%H%M")


def bumped_version(version: str, now: datetime | None = None) -> str:
    """Replace a trailing -r revision suffix, or append one."""
    suffix = revision_suffix(now)
    if REVISION_PATTERN.search(version):
        return REVISION_PATTERN.sub(lambda _: suffix, version)
    return version + suffix


def _mask_comments(source: str) -> str:
    """Blank out // and /* */ comments, keeping offsets and line breaks."""
    masked = list(source)
    index = 0
    quote = None
    length = len(source)
    while index < length:
        char = source[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote or (char == "\n" and quote != "`"):
                quote = None
            index += 1
            continue
        if char in "\"'`":
            quote = char
            index += 1
            continue
        if source.startswith("//", index):
            end = source.find("\n", index)
            end = length if end == -1 else end
        elif source.startswith("/*", index):
            end = source.find("*/", index + 2)
            end = length if end == -1 else end + 2
        else:
            index += 1
            continue
        for position in range(index, end):
            if masked[position] not in "\r\n":
                masked[position] = " "
        index = end
    return "".join(masked)


def _find_version(text: str) -> re.Match | None:
    """Locate the version declaration outside of comments."""
    return VERSION_PATTERN.search(_mask_comments(text))


@dataclass(frozen=True)
class _Entry:
    start: int
    end: int
    value: str


class _CacheList:
    """The cache-list declaration of a document, with entry offsets in its body."""

    def __init__(self, text: str):
        masked_text = _mask_comments(text)
        match = CACHE_LIST_PATTERN.search(masked_text)
        if match is None:
            raise FormatMismatchError(f"No {CACHE_LIST_IDENTIFIER} array declaration found")
        self.text = text
        self.body_start = match.start("body")
        self.body_end = match.end("body")
        self.body = text[self.body_start : self.body_end]
        self.masked = masked_text[self.body_start : self.body_end]

        residue = ENTRY_PATTERN.sub("", self.masked)
        if not re.fullmatch(r"[\s,]*", residue):
            raise FormatMismatchError(f"{CACHE_LIST_IDENTIFIER} contains items that are not quoted paths")

        self.entries = [
            _Entry(found.start(), found.end(), found.group("double") if found.group("double") is not None else found.group("single"))
            for found in ENTRY_PATTERN.finditer(self.masked)
        ]

    @property
    def values(self) -> list[str]:
        return [entry.value for entry in self.entries]

    def with_body(self, body: str) -> str:
        return self.text[: self.body_start] + body + self.text[self.body_end :]

    def indent(self) -> str:
        """Indentation of the last entry's line, or of the first non-blank line."""
        if self.entries:
            last = self.entries[-1]
            line_start = self.body.rfind("\n", 0, last.start) + 1
            prefix = self.body[line_start : last.start]
            if line_start > 0 and prefix.strip() == "":
                return prefix
            return DEFAULT_INDENT
        for line in self.body.splitlines():
            if line.strip():
                return line[: len(line) - len(line.lstrip())] or DEFAULT_INDENT
        return DEFAULT_INDENT

    def appended(self, path: str) -> str:
        quoted = f'"{path}"'
        multiline = "\n" in self.body
        newline = "\r\n" if "\r\n" in self.body else "\n"
        indent = self.indent()

        if not self.entries:
            if multiline:
                return self.with_body(f"{newline}{indent}{quoted}," + self.body)
            return self.with_body(quoted + self.body)

        last = self.entries[-1]
        comma = re.match(r"[ \t]*,", self.body[last.end :])
        if comma:
            position = last.end + comma.end()
            insertion = f"{newline}{indent}{quoted}," if multiline else f" {quoted},"
        else:
            position = last.end
            insertion = f",{newline}{indent}{quoted}" if multiline else f", {quoted}"
        return self.with_body(self.body[:position] + insertion + self.body[position:])

    def without(self, entry: _Entry) -> str:
        body = self.body
        following_comma = re.match(r"[ \t]*,", body[entry.end :])

        if following_comma:
            start = entry.start
            while start > 0 and body[start - 1] in " \t\r\n":
                start -= 1
            end = entry.end + following_comma.end()
            if start == entry.start:
                end += len(re.match(r"[ \t]*", body[end:]).group(0))
            return self.with_body(body[:start] + body[end:])

        preceding_comma = re.search(r",\s*$", body[: entry.start])
        if preceding_comma and self.masked[preceding_comma.start()] == ",":
            return self.with_body(body[: preceding_comma.start()] + body[entry.end :])

        # Sole entry: drop its whole line when it stands alone on one.
        line_start = body.rfind("\n", 0, entry.start) + 1
        line_end = body.find("\n", entry.end)
        alone = (
            line_start > 0
            and line_end != -1
            and body[line_start : entry.start].strip() == ""
            and body[entry.end : line_end].strip() == ""
        )
        if alone:
            return self.with_body(self.body[:line_start] + self.body[line_end + 1 :])
        return self.with_body(self.body[: entry.start] + self.body[entry.end :])


class ManifestRecord(BaseModel):
    """Structured view of the recognized declarations."""

    version: str | None = Field(None, description="Value of INSTALLATION_VERSION_NAME")
    cache_entries: list[str] = Field(default_factory=list, description="COMMON_FILES_TO_CACHE entries in order")

    def contains(self, path: str) -> bool:
        return normalize_cache_path(path) in self.cache_entries


class ServiceWorkerManifest:
    """In-memory serviceWorker.js text with idempotent patch operations.

    Every operation returns True when the text changed. Unrecognized
    declarations leave the text untouched and log a warning.
    """

    def __init__(self, text: str):
        self.text = text

    @property
    def version(self) -> str | None:
        match = _find_version(self.text)
        return match.group("value") if match else None

    @property
    def cache_entries(self) -> list[str]:
        try:
            return _CacheList(self.text).values
        except FormatMismatchError:
            return []

    def record(self) -> ManifestRecord:
        return ManifestRecord(version=self.version, cache_entries=self.cache_entries)

    def has_entry(self, path: str) -> bool:
        return self.record().contains(path)

    def bump_version(self, now: datetime | None = None) -> bool:
        """Set a fresh -rYYYYMMDDHHMM revision suffix on the version value."""
        match = _find_version(self.text)
        if match is None:
            logger.warning(f"{VERSION_IDENTIFIER} declaration not found, version left unchanged")
            return False
        new_version = bumped_version(match.group("value"), now)
        updated = self.text[: match.start("value")] + new_version + self.text[match.end("value") :]
        if updated == self.text:
            return False
        self.text = updated
        logger.info(f"Updated Service Worker version to: {new_version}")
        return True

    def add_entry(self, path: str) -> bool:
        """Append a path to the cache list unless it is already listed."""
        path = normalize_cache_path(path)
        try:
            cache_list = _CacheList(self.text)
        except FormatMismatchError as e:
            logger.warning(f"Cache list not updated: {e.message}")
            return False
        if self.record().contains(path):
            return False
        self.text = cache_list.appended(path)
        logger.info(f"Added {path} to Service Worker cache list")
        return True

    def remove_entry(self, path: str) -> bool:
        """Remove every occurrence of a path from the cache list."""
        path = normalize_cache_path(path)
        removed = False
        while True:
            try:
                cache_list = _CacheList(self.text)
            except FormatMismatchError as e:
                if not removed:
                    logger.warning(f"Cache list not updated: {e.message}")
                break
            entry = next((entry for entry in cache_list.entries if entry.value == path), None)
            if entry is None:
                break
            self.text = cache_list.without(entry)
            removed = True
        if removed:
            logger.info(f"Removed {path} from Service Worker cache list")
        return removed

    def relocate_references(self, old_path: str, new_path: str) -> bool:
        """Rename quoted references to old_path, unless new_path is already referenced."""
        old_path = normalize_cache_path(old_path)
        new_path = normalize_cache_path(new_path)
        if re.search(r"([\"'])" + re.escape(new_path) + r"\1", self.text):
            return False
        updated = re.sub(
            r"([\"'])" + re.escape(old_path) + r"\1",
            lambda found: f"{found.group(1)}{new_path}{found.group(1)}",
            self.text,
        )
        if updated == self.text:
            return False
        self.text = updated
        return True


class ManifestPatcher:
    """Read-modify-write access to a project's serviceWorker.js."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> ServiceWorkerManifest | None:
        """Load the manifest, or None when the project has none."""
        if not self.exists():
            logger.warning(f"{self.path.name} not found, skipping manifest update")
            return None
        try:
            return ServiceWorkerManifest(safe_read_file(self.path))
        except (OSError, UnicodeDecodeError) as e:
            raise AssetSyncError(f"Failed to read {self.path}: {e}", path=str(self.path)) from e

    def write(self, manifest: ServiceWorkerManifest) -> None:
        try:
            safe_write_file(self.path, manifest.text)
        except OSError as e:
            raise AssetSyncError(f"Failed to write {self.path}: {e}", path=str(self.path)) from e

    def _apply(self, operation) -> bool:
        manifest = self.read()
        if manifest is None:
            return False
        changed = operation(manifest)
        if changed:
            self.write(manifest)
        return changed

    def bump_version(self, now: datetime | None = None) -> bool:
        return self._apply(lambda manifest: manifest.bump_version(now))

    def add_entry(self, path: str) -> bool:
        return self._apply(lambda manifest: manifest.add_entry(path))

    def remove_entry(self, path: str) -> bool:
        return self._apply(lambda manifest: manifest.remove_entry(path))
