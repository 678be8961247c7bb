"""
Desired index configuration and comparison against a live index.

The mapping is derived from the closed FieldType / RelationshipType
enumerations, so a new field kind is picked up by adding an enum member.
"""

import copy
from typing import Any, Dict, Iterable, List

from searchcluster.storage.search.documents import FIELD_TYPES, RELATIONSHIP_TYPES

# Elasticsearch never echoes the _all meta field back in _mapping
UNECHOED_KEYS = frozenset({"_all"})

SETTINGS: Dict[str, Any] = {
    "index": {
        "auto_expand_replicas": "0-2",
        "analysis": {
            "filter": {
                "trigrams_filter": {
                    "min_gram": 3,
                    "type": "ngram",
                    "max_gram": 3,
                },
            },
            "analyzer": {
                "custom_trigrams": {
                    "type": "custom",
                    "filter": ["lowercase", "kstem", "trigrams_filter"],
                    "tokenizer": "standard",
                },
                "english_exact": {
                    "tokenizer": "standard",
                    "filter": ["lowercase"],
                },
            },
        },
    },
}


def _text_type(version: int) -> str:
    return "text" if version >= 5 else "string"


def _keyword_mapping(version: int) -> Dict[str, Any]:
    if version >= 5:
        return {"type": "keyword"}
    return {"type": "string", "index": "not_analyzed"}


def build_type_properties(version: int, timestamp_field: str) -> Dict[str, Any]:
    """Field mappings for a single document type."""
    properties: Dict[str, Any] = {}

    for field in FIELD_TYPES:
        properties[field] = {
            "type": _text_type(version),
            "analyzer": "english_exact",
            "search_analyzer": "english",
            "search_quote_analyzer": "english_exact",
        }

    for rel in RELATIONSHIP_TYPES:
        properties[rel] = _keyword_mapping(version)

    # The default (no text) query sorts on dateCreated
    properties["dateCreated"] = {"type": "date"}

    # Versions before 2 use the built-in _timestamp meta field instead
    if not timestamp_field.startswith("_"):
        properties[timestamp_field] = {"type": "date"}

    properties["tags"] = {
        "type": _text_type(version),
        "analyzer": "english",
        "store": True,
    }

    # Stored only, used to rebuild documents
    properties["field"] = {"type": "object", "enabled": False}
    properties["relationship"] = {"type": "object", "enabled": False}

    return properties


def build_index_configuration(
    version: int,
    document_types: Iterable[str],
    timestamp_field: str,
) -> Dict[str, Any]:
    properties = build_type_properties(version, timestamp_field)
    mappings: Dict[str, Any] = {}
    for doc_type in document_types:
        mapping: Dict[str, Any] = {"properties": copy.deepcopy(properties)}
        if version < 6:
            mapping["_all"] = {"enabled": True}
        mappings[doc_type] = mapping
    return {"settings": copy.deepcopy(SETTINGS), "mappings": mappings}


def normalize_config_value(value: Any) -> Any:
    """
    Elasticsearch tends to echo booleans back as the strings "true" and
    "false", and numbers as strings. Compare everything as strings.
    """
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def config_differences(
    actual: Dict[str, Any], required: Dict[str, Any], path: str = ""
) -> List[str]:
    """
    Recursively list the key paths where `actual` fails to satisfy
    `required`. Keys present only in `actual` are ignored.
    """
    differences: List[str] = []
    for key, value in required.items():
        key_path = f"{path}.{key}" if path else str(key)

        if key not in actual:
            if key in UNECHOED_KEYS:
                continue
            differences.append(f"{key_path} (missing)")
            continue

        current = actual[key]
        if isinstance(value, dict):
            if not isinstance(current, dict):
                differences.append(f"{key_path} (expected object)")
                continue
            differences.extend(config_differences(current, value, key_path))
            continue

        if isinstance(value, list):
            if not isinstance(current, list) or [
                normalize_config_value(v) for v in current
            ] != [normalize_config_value(v) for v in value]:
                differences.append(f"{key_path} (expected {value!r}, found {current!r})")
            continue

        if normalize_config_value(current) != normalize_config_value(value):
            differences.append(f"{key_path} (expected {value!r}, found {current!r})")

    return differences
