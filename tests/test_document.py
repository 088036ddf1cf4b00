import pytest

from res_translator.resources.codec import NBSP
from res_translator.resources.document import (
    ParseError,
    parse_entries,
    read_entries,
    serialize_entries,
    write_entries,
)
from res_translator.resources.entry import ListEntry, ScalarEntry

SAMPLE = """<?xml version="1.0" encoding="utf-8"?>
<resources>
    <!-- comment -->
    <string-array name="planets">
        <item>Mercury</item>
        <item>Venus</item>
    </string-array>
    <string name="hello">Hello</string>
    <string name="app_name" translatable="false">App</string>
    <plurals name="songs"><item quantity="one">One song</item></plurals>
    <string name="padded">Hi&nbsp;&nbsp;</string>
</resources>
"""


class TestParseEntries:
    def test_lists_follow_scalars(self) -> None:
        entries = parse_entries(SAMPLE)
        assert [e.key for e in entries] == ["hello", "app_name", "padded", "planets"]

    def test_values(self) -> None:
        entries = parse_entries(SAMPLE)
        assert entries[0] == ScalarEntry("hello", "Hello")
        assert entries[1] == ScalarEntry("app_name", "App", translatable=False)
        assert entries[2].value == "Hi" + NBSP + NBSP
        assert entries[3] == ListEntry("planets", ["Mercury", "Venus"])

    def test_accepts_bytes_with_bom(self) -> None:
        data = b"\xef\xbb\xbf" + SAMPLE.encode("utf-8")
        assert len(parse_entries(data)) == 4

    def test_without_xml_declaration(self) -> None:
        entries = parse_entries('<resources><string name="a">A &amp; B</string></resources>')
        assert entries == [ScalarEntry("a", "A & B")]

    def test_malformed(self) -> None:
        with pytest.raises(ParseError):
            parse_entries("<resources><string name='a'>oops</resources>")


class TestSerializeEntries:
    def test_layout(self) -> None:
        content = serialize_entries([ScalarEntry("a", "A"), ListEntry("b", ["1", "2"])])
        assert content == (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            "<resources>\n\n"
            '\t<string name="a">A</string>\n'
            '\t<string-array name="b">\n'
            "\t\t<item>1</item>\n"
            "\t\t<item>2</item>\n"
            "\t</string-array>\n"
            "\n</resources>\n"
        )

    def test_absent_scalar_written_empty(self) -> None:
        assert '<string name="a"></string>' in serialize_entries([ScalarEntry("a")])


class TestWriteEntries:
    def test_creates_directories_and_reads_back(self, tmp_path) -> None:
        path = tmp_path / "res" / "values-fr" / "strings.xml"
        written = write_entries(path, [ScalarEntry("a", "Bonjour&nbsp;"), ScalarEntry("b", "Tom &#38; Jerry")])
        assert written == path
        assert read_entries(path) == [
            ScalarEntry("a", "Bonjour" + NBSP),
            ScalarEntry("b", "Tom & Jerry"),
        ]


MARKUP_SAMPLE = """<?xml version="1.0" encoding="utf-8"?>
<resources xmlns:xliff="urn:oasis:names:tc:xliff:document:1.2">
    <string name="cmp">a &lt; b</string>
    <string name="bold">Tap <b>here</b> now</string>
    <string name="greet">Hi <xliff:g id="name">%s</xliff:g>!</string>
    <string-array name="styled"><item><i>One</i></item></string-array>
</resources>
"""


class TestInlineMarkup:
    def test_parse_keeps_tags_and_resolves_text(self) -> None:
        entries = parse_entries(MARKUP_SAMPLE)
        assert [e.value for e in entries[:3]] == [
            "a < b",
            "Tap <b>here</b> now",
            'Hi <xliff:g id="name">%s</xliff:g>!',
        ]
        assert entries[3] == ListEntry("styled", ["<i>One</i>"])

    def test_namespace_declared_when_used(self, tmp_path) -> None:
        path = tmp_path / "strings.xml"
        write_entries(path, [ScalarEntry("greet", 'Salut <xliff:g id="name">%s</xliff:g>!')])
        assert 'xmlns:xliff="urn:oasis:names:tc:xliff:document:1.2"' in path.read_text(encoding="utf-8")
        assert read_entries(path) == [ScalarEntry("greet", 'Salut <xliff:g id="name">%s</xliff:g>!')]
