"""
Resource Document Parser/Serializer

Reads and writes Android strings.xml files:
- <string name="...">value</string> becomes a ScalarEntry
- <string-array name="..."> with <item> children becomes a ListEntry
- Other tags are ignored

Values keep inline markup (<b>, <xliff:g>) as tags while the text between
them has its entities resolved.

Parsed list entries are placed after all scalar entries, whatever their
position in the file. Serialization is a plain textual join: values must
already be encoded by the caller.
"""

import re
from pathlib import Path
from typing import List, Sequence, Union

from lxml import etree

from res_translator.logger import get_logger
from res_translator.resources import entry as res
from res_translator.resources.codec import MARKUP_NAMESPACES, used_namespaces
from res_translator.resources.entry import ListEntry, ResourceEntry, ScalarEntry

logger = get_logger(__name__)

XML_HEADER = '<?xml version="1.0" encoding="utf-8"?>\n'
RESOURCES_HEADER = "<resources>\n\n"
RESOURCES_FOOTER = "</resources>\n"

# Target files written by the translator use &nbsp; padding, which plain XML
# does not define.
ENTITY_DECLARATIONS = b'<!DOCTYPE resources [<!ENTITY nbsp "&#160;">]>\n'

_XML_DECLARATION = re.compile(rb"^\s*<\?xml[^>]*\?>\s*")


class ParseError(Exception):
    """Raised when a resource file is not well-formed XML."""


def _with_entity_declarations(data: bytes) -> bytes:
    if data.startswith(b"\xef\xbb\xbf"):
        data = data[3:]
    if b"<!DOCTYPE" in data[:512]:
        return data
    match = _XML_DECLARATION.match(data)
    if match:
        declaration = match.group(0).rstrip() + b"\n"
        return declaration + ENTITY_DECLARATIONS + data[match.end():]
    return ENTITY_DECLARATIONS + data


def _is_element(node) -> bool:
    return isinstance(node.tag, str)


def _translatable(element) -> bool:
    return element.get("translatable", "true").strip().lower() != "false"


def _qualified_name(element, name: str) -> str:
    """Tag or attribute name with the prefix used in the file."""
    qname = etree.QName(name)
    if qname.namespace is None:
        return qname.localname
    for prefix, uri in element.nsmap.items():
        if prefix and uri == qname.namespace:
            return f"{prefix}:{qname.localname}"
    return qname.localname


def _render_markup(element) -> str:
    name = _qualified_name(element, element.tag)
    attributes = ""
    for key, value in element.attrib.items():
        quote = "'" if '"' in value else '"'
        attributes += f" {_qualified_name(element, key)}={quote}{value}{quote}"
    if element.text is None and len(element) == 0:
        return f"<{name}{attributes}/>"
    return f"<{name}{attributes}>{_inner_markup(element)}</{name}>"


def _inner_markup(element) -> str:
    """
    Content of an element: text with entities resolved and inline tags kept.

    Example: <string>a &lt; <b>b</b></string> gives 'a < <b>b</b>'.
    """
    parts = [element.text or ""]
    for child in element:
        if _is_element(child):
            parts.append(_render_markup(child))
        parts.append(child.tail or "")
    return "".join(parts)


def parse_entries(data: Union[bytes, str]) -> List[ResourceEntry]:
    """
    Parse resource file content into entries.

    Args:
        data: Raw file content

    Returns:
        Scalar entries in file order followed by list entries in file order

    Raises:
        ParseError: If the content is not well-formed XML
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    parser = etree.XMLParser(remove_comments=True, no_network=True)
    try:
        root = etree.fromstring(_with_entity_declarations(data), parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Malformed resource file: {e}") from e

    result: List[ResourceEntry] = []
    array_entries: List[ResourceEntry] = []

    for element in root:
        if not _is_element(element):
            continue
        tag = etree.QName(element).localname
        if tag == "string":
            result.append(ScalarEntry(
                key=element.get("name", ""),
                value=_inner_markup(element),
                translatable=_translatable(element),
            ))
        elif tag == "string-array":
            items = [_inner_markup(child) for child in element if _is_element(child)]
            array_entries.append(ListEntry(
                key=element.get("name", ""),
                items=items,
                translatable=_translatable(element),
            ))
        else:
            logger.debug(f"Ignoring <{tag}> element")

    result.extend(array_entries)
    return result


def read_entries(path: Union[str, Path]) -> List[ResourceEntry]:
    """Read and parse a resource file."""
    path = Path(path)
    return parse_entries(path.read_bytes())


def render_entry(entry: ResourceEntry) -> str:
    """Render one entry in its tag form."""
    match entry:
        case ListEntry(key=key, items=items):
            lines = [f'<string-array name="{key}">']
            lines.extend(f"\t\t<item>{item}</item>" for item in items)
            lines.append("\t</string-array>")
            return "\n".join(lines)
        case ScalarEntry(key=key, value=value):
            return f'<string name="{key}">{value if value is not None else ""}</string>'
    raise TypeError(f"Not a resource entry: {entry!r}")


def _resources_header(entries: Sequence[ResourceEntry]) -> str:
    """Opening <resources> tag, declaring the namespaces used by inline tags."""
    values: List[str] = []
    for entry in entries:
        values.extend(entry.items if res.is_list(entry) else [entry.value or ""])
    prefixes = used_namespaces(values)
    if not prefixes:
        return RESOURCES_HEADER
    declarations = "".join(f' xmlns:{prefix}="{MARKUP_NAMESPACES[prefix]}"' for prefix in prefixes)
    return f"<resources{declarations}>\n\n"


def serialize_entries(entries: Sequence[ResourceEntry]) -> str:
    """Build the full file content for a sequence of entries."""
    parts = [XML_HEADER, _resources_header(entries)]
    for entry in entries:
        parts.append("\t" + render_entry(entry) + "\n")
    parts.append("\n" + RESOURCES_FOOTER)
    return "".join(parts)


def write_entries(path: Union[str, Path], entries: Sequence[ResourceEntry]) -> Path:
    """
    Serialize entries and write them to path, creating directories as needed.

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(serialize_entries(entries).encode("utf-8"))
    logger.debug(f"Wrote {len(entries)} entries to {path}")
    return path
