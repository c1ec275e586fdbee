"""Constants describing an EstreUI project and the core package layout."""

from typing import Final

# Packages
CORE_PACKAGE_NAME: Final[str] = "estreui"
CLI_PACKAGE_NAME: Final[str] = "create-estreui"

# Project files
INDEX_FILE: Final[str] = "index.html"
SERVICE_WORKER_FILE: Final[str] = "serviceWorker.js"
PACKAGE_JSON_FILE: Final[str] = "package.json"
IGNORE_FILE: Final[str] = ".estreuiignore"

# Directory names
DIRECTORIES: Final[dict[str, str]] = {
    "scripts": "scripts",
    "lib": "scripts/lib",
    "node_modules": "node_modules",
}

# Script paths as referenced from index.html and serviceWorker.js
LIB_SCRIPT_PREFIX: Final[str] = "./scripts/lib/"
MAIN_SCRIPT_SRC: Final[str] = "./scripts/main.js"

# Asset directories mirrored from the core package
CORE_ASSET_DIRS: Final[list[str]] = ["scripts", "styles", "images", "vectors", "lotties"]

# Root files copied on init
CORE_ROOT_FILES: Final[list[str]] = [
    "index.html",
    "serviceWorker.js",
    "webmanifest.json",
    "favicon.ico",
    "stockHandlePrototypes.html",
    "customHandlePrototypes.html",
    "instantDoc.html",
    "fixedTop.html",
    "fixedBottom.html",
    "mainMenu.html",
    "staticDoc.html",
    "managedOverlay.html",
    "serviceLoader.html",
]

ESSENTIAL_ROOT_FILES: Final[list[str]] = [
    ".htaccess",
    ".gitignore",
    "webmanifest.json",
    "favicon.ico",
    "instantDoc.html",
]

# Libraries estreui depends on, copied into scripts/lib on init
BUNDLED_LIBRARIES: Final[list[str]] = ["jquery", "jcodd", "doctre", "modernism", "alienese"]

# Files users commonly edit; update never overwrites them
DEFAULT_IGNORES: Final[tuple[str, ...]] = (
    "scripts/main.js",
    "styles/main.css",
    "webmanifest.json",
    "serviceWorker.js",
    "index.html",
    "fixedTop.html",
    "fixedBottom.html",
    "mainMenu.html",
    "instantDoc.html",
    "staticDoc.html",
    "customHandlePrototypes.html",
    "README.md",
    "README_KR.md",
)
