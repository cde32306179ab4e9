from __future__ import annotations

from content_factory.asset_schema import asset_bundle_response_schema, required_fields


def test_schema_requires_every_bundle_field() -> None:
    schema = asset_bundle_response_schema()

    assert schema["type"] == "OBJECT"
    assert schema["required"] == list(required_fields())
    assert set(schema["properties"]) == set(required_fields())
    assert "episodeTitles" in schema["required"]
    assert "guestSwipeEmail" in schema["required"]


def test_nested_objects_require_all_their_properties() -> None:
    youtube = asset_bundle_response_schema()["properties"]["youtube"]

    assert youtube["required"] == ["titles", "description", "thumbnailText", "tags", "shorts"]
    short = youtube["properties"]["shorts"]["items"]
    assert short["required"] == ["timestamp", "hook", "score"]
    assert short["properties"]["score"]["type"] == "INTEGER"


def test_timestamp_rule_is_part_of_the_schema() -> None:
    timestamps = asset_bundle_response_schema()["properties"]["timestamps"]

    assert timestamps["type"] == "ARRAY"
    assert timestamps["items"]["required"] == ["time", "topic"]
    assert "Never invent timestamps" in timestamps["description"]
    assert "empty array" in timestamps["description"]
