"""
Resources module - strings.xml model

This module provides:
- codec: XML entity encoding with trailing whitespace preservation
- entry: ScalarEntry / ListEntry resource model
- document: strings.xml parsing and serialization
- filters: key filter rules
- paths: target language file paths
"""

from res_translator.resources.entry import (
    ResourceEntry,
    ScalarEntry,
    ListEntry,
    get_value,
    encode_xml_value,
    decode_xml_value,
    find_entry,
)
from res_translator.resources.document import (
    ParseError,
    parse_entries,
    read_entries,
    serialize_entries,
    write_entries,
)
from res_translator.resources.filters import (
    FilterRule,
    FilterRuleType,
    DEFAULT_FILTER_RULES,
    in_filter_rules,
    rules_from_config,
)
from res_translator.resources.paths import get_value_resource_path
