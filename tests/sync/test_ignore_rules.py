import pytest

from estreui.errors import AssetSyncError
from estreui.sync.ignore import IgnoreRuleSet, normalize_relative_path, parse_ignore_lines
from estreui.utils.path_constants import DEFAULT_IGNORES


@pytest.fixture
def project_with_ignore_file(tmp_path):
    (tmp_path / ".estreuiignore").write_text(
        "# keep my customizations\n"
        "\n"
        "styles/theme.css\n"
        "  ./images/logo.svg  \n"
        "vectors/\n"
    )
    return tmp_path


def test_normalize_relative_path():
    assert normalize_relative_path("./styles/main.css") == "styles/main.css"
    assert normalize_relative_path("scripts\\lib\\a.js") == "scripts/lib/a.js"
    assert normalize_relative_path("  index.html ") == "index.html"


def test_parse_ignore_lines_skips_comments_and_blanks():
    lines = parse_ignore_lines("# comment\n\nfoo.js\n   \n  # indented comment\nbar/baz.css\n")
    assert lines == ["foo.js", "bar/baz.css"]


def test_load_without_ignore_file_uses_defaults(tmp_path):
    rules = IgnoreRuleSet.load(tmp_path)
    assert len(rules) == len(set(DEFAULT_IGNORES))
    assert "scripts/main.js" in rules
    assert "serviceWorker.js" in rules


def test_load_merges_ignore_file(project_with_ignore_file):
    rules = IgnoreRuleSet.load(project_with_ignore_file)
    assert rules.contains("styles/theme.css")
    assert rules.contains("images/logo.svg")
    assert rules.contains_directory("vectors")
    assert rules.contains("index.html")


def test_custom_ignore_file_name(tmp_path):
    (tmp_path / "my.ignore").write_text("styles/base.css\n")
    rules = IgnoreRuleSet.load(tmp_path, "my.ignore", defaults=())
    assert list(rules) == ["styles/base.css"]


def test_matching_is_exact():
    rules = IgnoreRuleSet(["styles/main.css"])
    assert rules.contains("styles/main.css")
    assert rules.contains("./styles/main.css")
    assert not rules.contains("styles/main.css.map")
    assert not rules.contains("styles")
    assert not rules.contains("other/styles/main.css")
    # no glob syntax
    assert not IgnoreRuleSet(["styles/*.css"]).contains("styles/main.css")


def test_directory_entries_only_match_with_slash():
    rules = IgnoreRuleSet(["images/"])
    assert rules.contains_directory("images")
    assert not rules.contains("images")
    assert not IgnoreRuleSet(["images"]).contains_directory("images")


def test_empty_rule_set_ignores_nothing():
    rules = IgnoreRuleSet.empty()
    assert len(rules) == 0
    assert "index.html" not in rules
    assert 42 not in rules


def test_unreadable_ignore_file_raises(tmp_path):
    (tmp_path / ".estreuiignore").write_bytes(b"styles/\xff\xfe.css\n")
    with pytest.raises(AssetSyncError):
        IgnoreRuleSet.load(tmp_path)
