import json

import pytest

from estreui.library.resolver import (
    LibraryNotFound,
    LibraryResolver,
    LibrarySpec,
    dest_file_name,
    fallback_candidates,
    short_name,
)


@pytest.fixture
def node_modules(tmp_path):
    path = tmp_path / "node_modules"
    path.mkdir()
    return path


@pytest.fixture
def resolver(node_modules):
    return LibraryResolver(node_modules)


def test_missing_browser_entry_falls_back_to_dist(resolver, node_modules, install_package):
    """A declared entry that is missing on disk falls through to dist/<name>.js."""
    install_package(
        node_modules,
        "foo",
        {"dist/foo.js": "// foo"},
        manifest=json.dumps({"name": "foo", "browser": "dist/foo.esm.js"}),
    )

    result = resolver.resolve("foo")

    assert isinstance(result, LibrarySpec)
    assert result.resolved_entry_path == (node_modules / "foo" / "dist" / "foo.js").resolve()
    assert result.dest_file_name == "foo.js"


def test_browser_field_wins_over_main(resolver, node_modules, install_package):
    install_package(
        node_modules,
        "bar",
        {"browser/bar.bundle.js": "", "index.js": ""},
        manifest=json.dumps({"browser": "./browser/bar.bundle.js", "main": "index.js"}),
    )
    result = resolver.resolve("bar")
    assert isinstance(result, LibrarySpec)
    assert result.dest_file_name == "bar.bundle.js"


def test_generic_index_is_renamed_after_package(resolver, node_modules, install_package):
    install_package(node_modules, "tiny-lib", {"index.js": ""}, manifest=json.dumps({"main": "index.js"}))
    result = resolver.resolve("tiny-lib")
    assert isinstance(result, LibrarySpec)
    assert result.dest_file_name == "tiny-lib.js"


def test_main_without_extension(resolver, node_modules, install_package):
    install_package(node_modules, "plain", {"lib/plain.js": ""}, manifest=json.dumps({"main": "lib/plain"}))
    result = resolver.resolve("plain")
    assert isinstance(result, LibrarySpec)
    assert result.resolved_entry_path.name == "plain.js"


def test_no_manifest_uses_conventional_locations(resolver, node_modules, install_package):
    install_package(node_modules, "legacy", {"legacy.js": ""})
    result = resolver.resolve("legacy")
    assert isinstance(result, LibrarySpec)
    assert result.dest_file_name == "legacy.js"


def test_minified_fallback(resolver, node_modules, install_package):
    install_package(node_modules, "small", {"dist/small.min.js": ""}, manifest="{}")
    result = resolver.resolve("small")
    assert isinstance(result, LibrarySpec)
    assert result.dest_file_name == "small.min.js"


def test_scoped_package(resolver, node_modules, install_package):
    install_package(node_modules, "@acme/widget", {"dist/widget.js": ""}, manifest="{}")
    result = resolver.resolve("@acme/widget")
    assert isinstance(result, LibrarySpec)
    assert result.dest_file_name == "widget.js"


def test_invalid_manifest_is_treated_as_empty(resolver, node_modules, install_package):
    install_package(node_modules, "broken", {"dist/broken.js": ""}, manifest="{not json")
    assert isinstance(resolver.resolve("broken"), LibrarySpec)


def test_unresolvable_package_returns_not_found(resolver, node_modules, install_package):
    install_package(node_modules, "nothing", {"README.md": ""}, manifest=json.dumps({"main": "src/entry.mjs"}))

    result = resolver.resolve("nothing")

    assert isinstance(result, LibraryNotFound)
    assert result.tried[0] == "src/entry.mjs"
    assert "dist/nothing.js" in result.tried


def test_uninstalled_package_returns_not_found(resolver):
    result = resolver.resolve("ghost")
    assert isinstance(result, LibraryNotFound)
    assert "not installed" in result.reason


def test_helpers():
    assert short_name("@scope/pkg") == "pkg"
    assert short_name("pkg") == "pkg"
    assert dest_file_name("/x/node_modules/p/index.js", "p") == "p.js"
    assert dest_file_name("/x/node_modules/p/dist/p.umd.js", "p") == "p.umd.js"
    assert fallback_candidates("p") == ["dist/p.js", "dist/p.min.js", "p.js", "lib/p.js"]
