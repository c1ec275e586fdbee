"""
Test Configuration and Fixtures
=============================

This module provides pytest fixtures and utilities for testing the EstreUI CLI.
"""

from pathlib import Path

import pytest

from estreui.environment import reset_env_config
from estreui.utils.paths import ProjectPaths

SERVICE_WORKER_TEMPLATE = """// EstreUI service worker
const INSTALLATION_VERSION_NAME = "1.0.0.RC3-r202511261200";

const COMMON_FILES_TO_CACHE = [
    "./",
    "./index.html",
    "./scripts/jquery.js",
    "./scripts/main.js",
];

self.addEventListener("install", (event) => {
    event.waitUntil(caches.open(INSTALLATION_VERSION_NAME));
});
"""

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <script src="https://code.jquery.com/jquery-3.7.1.min.js"></script>
    <script defer type="text/javascript" src="./scripts/doctre.js"></script>
</head>
<body>
    <div id="app"></div>
    <script defer type="text/javascript" src="./scripts/main.js"></script>
</body>
</html>
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep ESTREUI_* variables from the developer's shell out of the tests."""
    for name in [
        "ESTREUI_DEBUG",
        "ESTREUI_LOG_LEVEL",
        "ESTREUI_CORE_PATH",
        "ESTREUI_NPM",
        "ESTREUI_IGNORE_FILE",
        "ESTREUI_DEV_PORT",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_env_config()
    yield
    reset_env_config()


@pytest.fixture
def core_package(tmp_path) -> Path:
    """A minimal estreui core package layout."""
    core = tmp_path / "core" / "node_modules" / "estreui"
    (core / "scripts").mkdir(parents=True)
    (core / "scripts" / "main.js").write_text("// core main\n")
    (core / "scripts" / "estreUi.js").write_text("// core framework\n")
    (core / "scripts" / "jquery.js").write_text("// bundled jquery\n")
    (core / "scripts" / "doctre.js").write_text("// bundled doctre\n")
    (core / "scripts" / "components").mkdir()
    (core / "scripts" / "components" / "panel.js").write_text("// panel\n")
    (core / "styles").mkdir()
    (core / "styles" / "main.css").write_text("/* core main */\n")
    (core / "styles" / "base.css").write_text("/* core base */\n")
    (core / "images").mkdir()
    (core / "images" / "logo.svg").write_text("<svg/>\n")
    (core / "index.html").write_text(INDEX_TEMPLATE)
    (core / "serviceWorker.js").write_text(SERVICE_WORKER_TEMPLATE)
    (core / "webmanifest.json").write_text("{}\n")
    (core / "instantDoc.html").write_text("<div>instant</div>\n")
    (core / "mainMenu.html").write_text("<nav>core menu</nav>\n")
    (core / ".gitignore").write_text("node_modules/\n")
    return core


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """An existing EstreUI project with the generated documents in place."""
    project = tmp_path / "project"
    (project / "scripts" / "lib").mkdir(parents=True)
    (project / "index.html").write_text(INDEX_TEMPLATE)
    (project / "serviceWorker.js").write_text(SERVICE_WORKER_TEMPLATE)
    return project


@pytest.fixture
def project_paths(project_dir) -> ProjectPaths:
    return ProjectPaths.for_root(project_dir)


def _install_package(node_modules: Path, name: str, files: dict[str, str], manifest: str | None = None) -> Path:
    package_root = node_modules / name
    package_root.mkdir(parents=True, exist_ok=True)
    if manifest is not None:
        (package_root / "package.json").write_text(manifest)
    for relative, content in files.items():
        target = package_root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return package_root


@pytest.fixture
def install_package():
    """Write a fake npm package into a node_modules directory."""
    return _install_package
