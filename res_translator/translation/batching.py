"""
Batch Processing Module

Contains the pure steps around a translation request:
- Filtering entries by key rules
- Splitting entries into batches
- Turning an engine answer back into translated entries
- Merging translations with the existing target file
"""

from typing import List, Optional, Sequence

from res_translator.logger import get_logger
from res_translator.resources import entry as res
from res_translator.resources.entry import ListEntry, ResourceEntry, ScalarEntry
from res_translator.resources.filters import FilterRule, in_filter_rules

logger = get_logger(__name__)

Batch = List[ResourceEntry]


def filter_entries(entries: Sequence[ResourceEntry], filter_rules: Sequence[FilterRule]) -> List[ResourceEntry]:
    """Drop entries whose key matches a rule or that are marked translatable="false"."""
    result = []
    for entry in entries:
        if in_filter_rules(entry.key, filter_rules):
            logger.debug(f"Filter: {entry.key}")
            continue
        if not entry.translatable:
            logger.debug(f"Not translatable: {entry.key}")
            continue
        result.append(entry)
    return result


def chunk(entries: Sequence[ResourceEntry], batch_size: int) -> List[Batch]:
    """Split entries in order into batches of at most batch_size."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(entries[i:i + batch_size]) for i in range(0, len(entries), batch_size)]


def split_batches(entries: Sequence[ResourceEntry], batch_size: int = 50) -> List[Batch]:
    """
    Partition entries into translation batches.

    Trailing list entries are taken first, scanning backward, each as a
    singleton batch. The remaining scalar entries follow in order, chunked
    into batches of batch_size. A list entry found among the scalars also
    gets its own batch, after the scalar batches, so kinds are never mixed.
    """
    batches: List[Batch] = []

    head_end = len(entries)
    while head_end > 0 and res.is_list(entries[head_end - 1]):
        batches.append([entries[head_end - 1]])
        head_end -= 1

    head = entries[:head_end]
    scalars = [e for e in head if not res.is_list(e)]
    stray_lists = [e for e in head if res.is_list(e)]

    batches.extend(chunk(scalars, batch_size))
    batches.extend([e] for e in stray_lists)
    return batches


def is_list_batch(batch: Batch) -> bool:
    return len(batch) == 1 and res.is_list(batch[0])


def expected_line_count(batch: Batch) -> int:
    """Number of lines the engine must return for this batch."""
    if is_list_batch(batch):
        return len(batch[0].items)
    return len(batch)


def build_translated_entries(batch: Batch, lines: Sequence[str]) -> Optional[List[ResourceEntry]]:
    """
    Build encoded translated entries from an engine answer.

    For a scalar batch, line i is the value of entry i. For a list batch the
    lines replace the entry's items. Each result is encoded against the source
    entry so it keeps the source's trailing whitespace.

    Returns:
        The translated entries, or None if the answer is not line-aligned
        with the batch
    """
    expected = expected_line_count(batch)
    if len(lines) != expected:
        logger.warning(f"Engine returned {len(lines)} lines, expected {expected}")
        return None

    if is_list_batch(batch):
        source = batch[0]
        translated: ResourceEntry = ListEntry(source.key, list(lines), source.translatable)
        res.encode_xml_value(translated, source)
        return [translated]

    result: List[ResourceEntry] = []
    for source, line in zip(batch, lines):
        translated = ScalarEntry(source.key, line, source.translatable)
        res.encode_xml_value(translated, source)
        result.append(translated)
    return result


def merge_entries(
    source_entries: Sequence[ResourceEntry],
    translated_entries: Sequence[ResourceEntry],
    existing_entries: Sequence[ResourceEntry],
    override: bool,
) -> List[ResourceEntry]:
    """
    Build the target file content.

    Every source entry yields one result entry, starting absent. Unless
    override is set, a same-kind entry from the existing target file seeds it;
    a fresh translation for the key then replaces it.
    """
    result: List[ResourceEntry] = []
    for source in source_entries:
        target = res.empty_like(source)

        if not override:
            existing = res.find_entry(existing_entries, source.key)
            if existing is not None and res.same_kind(existing, target):
                res.assign_content(target, existing)

        translated = res.find_entry(translated_entries, source.key)
        if translated is not None and res.same_kind(translated, target):
            res.assign_content(target, translated)

        result.append(target)
    return result


def decoded_copies(entries: Sequence[ResourceEntry]) -> List[ResourceEntry]:
    """Copies of entries with plain values, as sent to an engine."""
    copies = []
    for entry in entries:
        copy = res.copy_entry(entry)
        res.decode_xml_value(copy)
        copies.append(copy)
    return copies


def encode_existing_entries(entries: Sequence[ResourceEntry]) -> None:
    """Re-encode entries read back from a target file so they can be written again."""
    for entry in entries:
        res.decode_xml_value(entry)
        res.encode_xml_value(entry, entry)
