import pytest

from res_translator.resources.codec import NBSP, decode, encode, split_markup, trailing_space_count


class TestTrailingSpaceCount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Hello", 0),
            ("Hello  ", 2),
            ("Hello" + NBSP, 1),
            ("Hello " + NBSP + " ", 3),
            ("a b", 0),
            ("", 0),
            (None, 0),
        ],
    )
    def test_counts_spaces_and_nbsp(self, text, expected) -> None:
        assert trailing_space_count(text) == expected


class TestEncode:
    def test_appends_nbsp_padding(self) -> None:
        assert encode("Hello", 2) == "Hello&nbsp;&nbsp;"

    def test_ampersand_written_as_numeric_entity(self) -> None:
        assert encode("Tom & Jerry", 0) == "Tom &#38; Jerry"

    def test_apostrophe_escaped(self) -> None:
        assert encode("Don't", 0) == "Don\\'t"

    def test_inner_spaces_untouched(self) -> None:
        assert encode("a b c", 0) == "a b c"


class TestDecode:
    def test_none_passes_through(self) -> None:
        assert decode(None) is None

    def test_nbsp_entities(self) -> None:
        assert decode("Hello&nbsp;&nbsp;") == "Hello  "
        assert decode("Hello&#160;") == "Hello "

    def test_ampersand_entities(self) -> None:
        assert decode("Tom &#38; Jerry") == "Tom & Jerry"
        assert decode("Tom &amp; Jerry") == "Tom & Jerry"

    def test_apostrophe_unescaped_without_entities(self) -> None:
        assert decode("Don\\'t") == "Don't"

    def test_plain_text_unchanged(self) -> None:
        assert decode("Hello world") == "Hello world"

    def test_reverses_encode(self) -> None:
        assert decode(encode("A & B's", 0)) == "A & B's"
        assert decode(encode("Wait", 3)) == "Wait   "


class TestRoundTrip:
    @pytest.mark.parametrize("text", ["Hello", "Tom & Jerry", "Don't stop", "A & B's & C", "a b"])
    @pytest.mark.parametrize("count", [0, 1, 3])
    def test_decode_reverses_padding(self, text, count) -> None:
        """Decoding restores the text plus one space per padding entity."""
        decoded = decode(encode(text, count))
        assert decoded == text + " " * count
        assert trailing_space_count(decoded) == count


class TestMarkup:
    def test_stray_angle_brackets_escaped(self) -> None:
        assert encode("a < b > c", 0) == "a &#60; b &#62; c"

    def test_inline_tags_kept(self) -> None:
        assert encode("Tap <b>here</b>", 0) == "Tap <b>here</b>"
        assert encode('Hi <xliff:g id="name">%s</xliff:g>!', 0) == 'Hi <xliff:g id="name">%s</xliff:g>!'

    def test_apostrophe_in_tag_text_only(self) -> None:
        assert encode("<i>Don't</i>", 1) == "<i>Don\\'t</i>&nbsp;"

    def test_unbalanced_tags_escaped_as_text(self) -> None:
        assert encode("x <y> z", 0) == "x &#60;y&#62; z"

    def test_decode_angle_brackets(self) -> None:
        assert decode("a &#60; b &gt; c") == "a < b > c"

    def test_split_markup(self) -> None:
        assert split_markup("a <b>c</b> < d") == [
            (False, "a "), (True, "<b>"), (False, "c"), (True, "</b>"), (False, " < d"),
        ]
