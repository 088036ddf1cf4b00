"""
XML Entity Codec

Reversible escaping used for resource values:
- Ampersands and stray angle brackets are written as numeric entities
- Apostrophes are escaped with a backslash (Android resource convention)
- Inline markup such as <b> or <xliff:g> is kept as markup
- Trailing whitespace is re-applied as &nbsp; padding

Translation engines strip trailing whitespace, so the amount of padding is
counted on the source value and re-applied to the translated value instead of
being carried through the engine.
"""

import re
from typing import List, NamedTuple, Optional, Sequence, Tuple

from lxml import etree


class XmlCode(NamedTuple):
    """One reversible entity: raw character, named form and numeric form."""
    raw: str
    escape_string: str
    decimal_string: str


# Declared order matters for decoding
CODES = (
    XmlCode(" ", "&nbsp;", "&#160;"),
    XmlCode("&", "&amp;", "&#38;"),
    XmlCode("<", "&lt;", "&#60;"),
    XmlCode(">", "&gt;", "&#62;"),
)

# Escaped in text only; inside a markup tag they are syntax
MARKUP_CHARACTERS = ("<", ">")

SPACE_ENTITY = "&nbsp;"
NBSP = "\u00a0"

# Prefixes allowed on inline tags, declared on <resources> when used
MARKUP_NAMESPACES = {
    "xliff": "urn:oasis:names:tc:xliff:document:1.2",
    "tools": "http://schemas.android.com/tools",
}

_ENTITY_PATTERN = re.compile(r"&#?.+;")
_TAG_PATTERN = re.compile(
    r"</?[A-Za-z_][\w:.-]*"
    r"(?:\s+[A-Za-z_][\w:.-]*\s*=\s*(?:\"[^\"<]*\"|'[^'<]*'))*"
    r"\s*/?>"
)
_NAMESPACE_DECLARATIONS = "".join(f' xmlns:{prefix}="{uri}"' for prefix, uri in MARKUP_NAMESPACES.items())


def trailing_space_count(text: Optional[str]) -> int:
    """
    Count trailing space and non-breaking-space characters.

    Examples:
        >>> trailing_space_count("Hello  ")
        2
        >>> trailing_space_count("Hello\\u00a0 ")
        2
    """
    if not text:
        return 0
    return len(text) - len(text.rstrip(" " + NBSP))


def split_markup(text: str) -> List[Tuple[bool, str]]:
    """
    Split text into (is_tag, segment) pairs.

    Examples:
        >>> split_markup("a <b>c</b>")
        [(False, 'a '), (True, '<b>'), (False, 'c'), (True, '</b>')]
    """
    segments = []
    position = 0
    for match in _TAG_PATTERN.finditer(text):
        if match.start() > position:
            segments.append((False, text[position:match.start()]))
        segments.append((True, match.group(0)))
        position = match.end()
    if position < len(text):
        segments.append((False, text[position:]))
    return segments


def _encode_text(text: str, codes: Sequence[XmlCode]) -> str:
    for code in codes:
        if code.raw == " ":
            continue
        text = text.replace(code.raw, code.decimal_string)
    return text.replace("'", "\\'")


def _encode_tag(tag: str, codes: Sequence[XmlCode]) -> str:
    for code in codes:
        if code.raw == " " or code.raw in MARKUP_CHARACTERS:
            continue
        tag = tag.replace(code.raw, code.decimal_string)
    return tag


def is_well_formed(fragment: str) -> bool:
    """Check that an encoded value can be the content of an element."""
    try:
        etree.fromstring(f"<value{_NAMESPACE_DECLARATIONS}>{fragment}</value>")
    except etree.XMLSyntaxError:
        return False
    return True


def encode(text: str, tail_space_count: int, codes: Sequence[XmlCode] = CODES) -> str:
    """
    Encode a value for storage in a resource file.

    Markup tags are kept when the result is well-formed; otherwise the whole
    value is escaped as text.

    Args:
        text: Plain value
        tail_space_count: Number of &nbsp; entities appended at the end
        codes: Entity table; the space code is never applied here

    Returns:
        Encoded value
    """
    encoded = "".join(
        _encode_tag(segment, codes) if is_tag else _encode_text(segment, codes)
        for is_tag, segment in split_markup(text)
    )
    if not is_well_formed(encoded):
        encoded = _encode_text(text, codes)

    return encoded + SPACE_ENTITY * tail_space_count


def decode(text: Optional[str], codes: Sequence[XmlCode] = CODES) -> Optional[str]:
    """
    Reverse encode().

    None is passed through. Text without any entity marker is only
    un-escaped for apostrophes.
    """
    if text is None:
        return None

    for code in codes:
        if not _ENTITY_PATTERN.search(text):
            break
        text = text.replace(code.decimal_string, code.raw)
        text = text.replace(code.escape_string, code.raw)

    return text.replace("\\'", "'")


def used_namespaces(values: Sequence[str]) -> List[str]:
    """Known namespace prefixes appearing on tags in the given values."""
    used = set()
    for value in values:
        for is_tag, segment in split_markup(value):
            prefix = re.match(r"</?([A-Za-z_][\w.-]*):", segment) if is_tag else None
            if prefix and prefix.group(1) in MARKUP_NAMESPACES:
                used.add(prefix.group(1))
    return sorted(used)
