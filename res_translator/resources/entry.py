"""
Resource Entry Model

A resource entry is one translatable unit of a strings.xml file:
- ScalarEntry: <string name="key">value</string>
- ListEntry: <string-array name="key"> with ordered <item> children

Both kinds share the key; everything that depends on the kind is dispatched
here so callers never need to inspect the entry type themselves.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from res_translator.resources import codec


@dataclass
class ScalarEntry:
    """A <string> resource."""
    key: str
    value: Optional[str] = None
    translatable: bool = True


@dataclass
class ListEntry:
    """A <string-array> resource."""
    key: str
    items: List[str] = field(default_factory=list)
    translatable: bool = True


ResourceEntry = Union[ScalarEntry, ListEntry]


def get_value(entry: ResourceEntry) -> Optional[str]:
    """
    Flat value of an entry, used for filtering, lookup and translation requests.

    For a list entry this is the items joined by newlines, with newlines inside
    each item turned into spaces. The view is one-way; it is never parsed back
    into items.
    """
    match entry:
        case ScalarEntry(value=value):
            return value
        case ListEntry(items=items):
            return "\n".join(item.replace("\n", " ") for item in items)
    raise TypeError(f"Not a resource entry: {entry!r}")


def is_list(entry: ResourceEntry) -> bool:
    return isinstance(entry, ListEntry)


def same_kind(entry: ResourceEntry, other: ResourceEntry) -> bool:
    return type(entry) is type(other)


def is_absent(entry: ResourceEntry) -> bool:
    """True when the entry carries no content at all."""
    match entry:
        case ScalarEntry(value=value):
            return value is None
        case ListEntry(items=items):
            return not items
    raise TypeError(f"Not a resource entry: {entry!r}")


def copy_entry(entry: ResourceEntry) -> ResourceEntry:
    match entry:
        case ScalarEntry(key=key, value=value, translatable=translatable):
            return ScalarEntry(key, value, translatable)
        case ListEntry(key=key, items=items, translatable=translatable):
            return ListEntry(key, list(items), translatable)
    raise TypeError(f"Not a resource entry: {entry!r}")


def empty_like(entry: ResourceEntry) -> ResourceEntry:
    """An absent entry with the same key and kind."""
    match entry:
        case ScalarEntry():
            return ScalarEntry(entry.key, None, entry.translatable)
        case ListEntry():
            return ListEntry(entry.key, [], entry.translatable)
    raise TypeError(f"Not a resource entry: {entry!r}")


def assign_content(target: ResourceEntry, source: ResourceEntry) -> None:
    """Copy value or items of source into target (same kind) in place."""
    match target, source:
        case ScalarEntry(), ScalarEntry():
            target.value = source.value
        case ListEntry(), ListEntry():
            target.items = list(source.items)
        case _:
            raise TypeError(f"Cannot assign {type(source).__name__} to {type(target).__name__}")


def _encode_value(value: str, reference_value: Optional[str]) -> str:
    count = codec.trailing_space_count(reference_value)
    return codec.encode(value.rstrip(" " + codec.NBSP), count)


def encode_xml_value(entry: ResourceEntry, reference: ResourceEntry) -> None:
    """
    Encode an entry in place, borrowing the trailing whitespace of reference.

    A freshly translated value lost its trailing whitespace in the engine, so
    the padding is taken from the source entry it was translated from. For
    lists, item i is paired with reference item i.

    Raises:
        IndexError: If a list entry has more items than its reference
    """
    match entry, reference:
        case ScalarEntry(value=None), _:
            return
        case ScalarEntry(), ScalarEntry():
            entry.value = _encode_value(entry.value, reference.value)
        case ListEntry(), ListEntry():
            ref_items = reference.items
            if len(entry.items) > len(ref_items):
                raise IndexError(
                    f"'{entry.key}' has {len(entry.items)} items, reference has {len(ref_items)}"
                )
            entry.items = [
                _encode_value(item, ref_items[i]) for i, item in enumerate(entry.items)
            ]
        case _:
            raise TypeError(f"Cannot encode {type(entry).__name__} against {type(reference).__name__}")


def decode_xml_value(entry: ResourceEntry) -> None:
    """Decode an entry in place."""
    match entry:
        case ScalarEntry():
            entry.value = codec.decode(entry.value)
        case ListEntry():
            entry.items = [codec.decode(item) for item in entry.items]


def find_entry(entries: Iterable[ResourceEntry], key: str) -> Optional[ResourceEntry]:
    """Return the first entry with the given key, or None."""
    for entry in entries:
        if entry.key == key:
            return entry
    return None


def get_keys(entries: Iterable[ResourceEntry]) -> List[str]:
    return [entry.key for entry in entries]


def join_values(entries: Iterable[ResourceEntry]) -> str:
    """
    Join entry values into the newline separated text sent to an engine.

    Missing values are sent as empty lines and line breaks inside scalar values
    become spaces so that line i always belongs to entry i. A list entry
    contributes one line per item.
    """
    lines = []
    for entry in entries:
        value = get_value(entry) or ""
        lines.append(value if is_list(entry) else value.replace("\n", " "))
    return "\n".join(lines)
