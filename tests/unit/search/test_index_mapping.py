from searchcluster.storage.search.documents import FIELD_TYPES, RELATIONSHIP_TYPES
from searchcluster.storage.search.mapping import (
    SETTINGS,
    build_index_configuration,
    config_differences,
    normalize_config_value,
)


def test_configuration_covers_every_field_and_relationship():
    config = build_index_configuration(5, ["TASK", "WIKI"], "lastModified")

    assert set(config["mappings"]) == {"TASK", "WIKI"}
    properties = config["mappings"]["TASK"]["properties"]
    for field in FIELD_TYPES:
        assert properties[field]["type"] == "text"
        assert properties[field]["analyzer"] == "english_exact"
    for rel in RELATIONSHIP_TYPES:
        assert properties[rel] == {"type": "keyword"}
    assert properties["dateCreated"] == {"type": "date"}
    assert properties["lastModified"] == {"type": "date"}
    assert properties["tags"]["store"] is True


def test_legacy_mapping_types():
    config = build_index_configuration(1, ["TASK"], "_timestamp")
    properties = config["mappings"]["TASK"]["properties"]

    assert properties["body"]["type"] == "string"
    assert properties["auth"] == {"type": "string", "index": "not_analyzed"}
    assert "_timestamp" not in properties
    assert config["mappings"]["TASK"]["_all"] == {"enabled": True}


def test_all_meta_field_dropped_after_version_6():
    config = build_index_configuration(7, ["TASK"], "lastModified")
    assert "_all" not in config["mappings"]["TASK"]


def test_normalize_config_value():
    assert normalize_config_value(True) == "true"
    assert normalize_config_value(False) == "false"
    assert normalize_config_value(3) == "3"
    assert normalize_config_value("0-2") == "0-2"


def test_boolean_and_numeric_strings_match():
    required = {"store": True, "min_gram": 3}
    actual = {"store": "true", "min_gram": "3"}
    assert config_differences(actual, required) == []


def test_extra_live_keys_are_ignored():
    assert config_differences({"a": 1, "b": 2}, {"a": 1}) == []


def test_nested_differences_report_paths():
    required = {"index": {"analysis": {"analyzer": {"english_exact": {"tokenizer": "standard"}}}}}
    actual = {"index": {"analysis": {"analyzer": {"english_exact": {"tokenizer": "whitespace"}}}}}

    differences = config_differences(actual, required)

    assert len(differences) == 1
    assert differences[0].startswith("index.analysis.analyzer.english_exact.tokenizer")


def test_scalar_where_object_expected():
    assert config_differences({"a": "x"}, {"a": {"b": 1}}) == ["a (expected object)"]


def test_missing_all_key_is_exempt_but_others_are_not():
    required = {"TASK": {"_all": {"enabled": True}, "properties": {"tags": {"type": "text"}}}}

    assert config_differences({"TASK": {"properties": {"tags": {"type": "text"}}}}, required) == []
    assert config_differences({"TASK": {"properties": {}}}, required) == [
        "TASK.properties.tags (missing)"
    ]


def test_configuration_is_a_fresh_copy_each_call():
    first = build_index_configuration(5, ["TASK", "WIKI"], "lastModified")
    first["settings"]["index"]["auto_expand_replicas"] = "0-0"
    first["settings"]["index"]["analysis"]["analyzer"]["english_exact"]["filter"].append("asciifolding")
    first["mappings"]["TASK"]["properties"]["tags"]["store"] = False

    second = build_index_configuration(5, ["TASK", "WIKI"], "lastModified")

    assert SETTINGS["index"]["auto_expand_replicas"] == "0-2"
    assert second["settings"]["index"]["auto_expand_replicas"] == "0-2"
    assert second["settings"]["index"]["analysis"]["analyzer"]["english_exact"]["filter"] == ["lowercase"]
    assert second["mappings"]["TASK"]["properties"]["tags"]["store"] is True
    assert first["mappings"]["WIKI"]["properties"]["tags"]["store"] is True
