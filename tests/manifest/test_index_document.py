import pytest

from estreui.manifest.index_document import IndexDocument, IndexDocumentPatcher, script_tag

FOO_TAG = '<script defer type="text/javascript" src="./scripts/lib/foo.js"></script>'

WITH_MAIN_SCRIPT = """<html>
<body>
    <div id="app"></div>
    <script defer type="text/javascript" src="./scripts/main.js"></script>
</body>
</html>
"""

WITHOUT_MAIN_SCRIPT = """<html>
<body>
    <div id="app"></div>
</body>
</html>
"""


def test_insert_before_body_close_without_main_script():
    """Without the main script tag, the new tag goes right before </body>."""
    document = IndexDocument(WITHOUT_MAIN_SCRIPT)

    assert document.add_script_reference("foo.js")

    text = document.text
    assert text.count(FOO_TAG) == 1
    assert text.index(FOO_TAG) + len(FOO_TAG) + len("\n") == text.index("</body>")
    assert "    <div id=\"app\"></div>\n    " + FOO_TAG + "\n</body>" in text


def test_insert_before_main_script():
    document = IndexDocument(WITH_MAIN_SCRIPT)

    assert document.add_script_reference("foo.js")

    assert f"    {FOO_TAG}\n    <script defer type=\"text/javascript\" src=\"./scripts/main.js\"></script>" in document.text


def test_insert_is_idempotent():
    document = IndexDocument(WITH_MAIN_SCRIPT)
    document.add_script_reference("foo.js")
    once = document.text

    assert document.add_script_reference("foo.js") is False
    assert document.text == once


def test_existing_tag_with_other_attributes_counts_as_present():
    text = WITH_MAIN_SCRIPT.replace("<div", "<script src='./scripts/lib/foo.js' async></script>\n    <div")
    document = IndexDocument(text)
    assert document.has_script("./scripts/lib/foo.js")
    assert document.add_script_reference("foo.js") is False


def test_data_src_is_not_a_reference():
    document = IndexDocument('<body><script data-src="./scripts/lib/foo.js"></script></body>')
    assert not document.has_script("./scripts/lib/foo.js")


@pytest.mark.parametrize("text", [WITH_MAIN_SCRIPT, WITHOUT_MAIN_SCRIPT, "<body><p>x</p></body>"])
def test_add_then_remove_restores_text(text):
    document = IndexDocument(text)
    assert document.add_script_reference("foo.js")
    assert document.remove_script_reference("foo.js")
    assert document.text == text


def test_inline_body_close():
    document = IndexDocument("<body><p>x</p></body>")
    document.add_script_reference("foo.js")
    assert document.text == f"<body><p>x</p>{FOO_TAG}</body>"


def test_crlf_document():
    text = WITH_MAIN_SCRIPT.replace("\n", "\r\n")
    document = IndexDocument(text)
    document.add_script_reference("foo.js")
    assert f"{FOO_TAG}\r\n    <script" in document.text
    document.remove_script_reference("foo.js")
    assert document.text == text


def test_no_anchor_is_a_no_op():
    document = IndexDocument("<div>fragment</div>")
    assert document.add_script_reference("foo.js") is False
    assert document.text == "<div>fragment</div>"


def test_remove_matches_any_attribute_order():
    text = (
        "<body>\n"
        "    <script src=\"./scripts/lib/foo.js\" defer></script>\n"
        "    <SCRIPT type='text/javascript' src='./scripts/lib/foo.js'></SCRIPT>\n"
        "    <script src=\"./scripts/lib/foobar.js\"></script>\n"
        "</body>\n"
    )
    document = IndexDocument(text)

    assert document.remove_script_reference("foo.js")

    assert document.text == "<body>\n    <script src=\"./scripts/lib/foobar.js\"></script>\n</body>\n"
    assert document.remove_script_reference("foo.js") is False


def test_relocate_script():
    document = IndexDocument('<script src="./scripts/doctre.js"></script>')
    assert document.relocate_script("doctre")
    assert document.text == '<script src="./scripts/lib/doctre.js"></script>'
    assert document.relocate_script("doctre") is False


def test_replace_jquery_cdn():
    document = IndexDocument('<head>\n    <script src="https://code.jquery.com/jquery-3.7.1.min.js"></script>\n</head>')
    assert document.replace_jquery_cdn()
    assert document.text == f"<head>\n    {script_tag('./scripts/lib/jquery.js')}\n</head>"
    assert document.replace_jquery_cdn() is False


def test_replace_jquery_cdn_when_local_copy_referenced():
    local = script_tag("./scripts/lib/jquery.js")
    document = IndexDocument(f'<script src="https://code.jquery.com/jquery-3.7.1.js"></script>{local}')
    assert document.replace_jquery_cdn()
    assert document.text == local


def test_patcher(tmp_path):
    path = tmp_path / "index.html"
    path.write_text(WITH_MAIN_SCRIPT)
    patcher = IndexDocumentPatcher(path)

    assert patcher.add_script_reference("foo.js")
    assert FOO_TAG in path.read_text()
    assert patcher.remove_script_reference("foo.js")
    assert path.read_text() == WITH_MAIN_SCRIPT


def test_patcher_missing_file(tmp_path):
    patcher = IndexDocumentPatcher(tmp_path / "index.html")
    assert patcher.read() is None
    assert patcher.add_script_reference("foo.js") is False
