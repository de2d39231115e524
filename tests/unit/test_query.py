"""Tests for database row flattening, schema listing and limit clamping."""

from __future__ import annotations

import pytest
from conftest import rich

from notionsync.models import SchemaProperty
from notionsync.query import clamp_limit, flatten_page, flatten_property, schema_from_database


def _names(user_id: str) -> str:
    return {"u1": "Ada"}.get(user_id, "Unknown")


def _prop(prop_type: str, value) -> dict:
    return {"type": prop_type, prop_type: value}


class TestFlattenProperty:
    @pytest.mark.parametrize(
        "prop, expected",
        [
            (_prop("title", rich("Task 1")), "Task 1"),
            (_prop("rich_text", rich("a") + rich("b")), "ab"),
            (_prop("number", 3.5), 3.5),
            (_prop("select", {"name": "High"}), "High"),
            (_prop("select", None), None),
            (_prop("status", {"name": "Done"}), "Done"),
            (_prop("multi_select", [{"name": "a"}, {"name": "b"}]), ["a", "b"]),
            (_prop("checkbox", True), True),
            (_prop("url", "https://x.y"), "https://x.y"),
            (_prop("email", None), None),
            (_prop("relation", [{"id": "r1"}, {"id": "r2"}]), ["r1", "r2"]),
            (_prop("created_time", "2026-01-05T09:30:00.000Z"), "2026-01-05T09:30:00.000Z"),
        ],
    )
    def test_simple_types(self, prop, expected):
        assert flatten_property(prop, _names) == expected

    def test_date(self):
        assert flatten_property(_prop("date", {"start": "2026-01-05", "end": None}), _names) == "2026-01-05"
        assert flatten_property(_prop("date", {"start": "a", "end": "b"}), _names) == {"start": "a", "end": "b"}

    def test_people_resolved_by_id(self):
        value = [{"id": "u1"}, {"id": "u2", "name": "Grace"}, {"id": "u3"}]
        assert flatten_property(_prop("people", value), _names) == ["Ada", "Grace", "Unknown"]

    def test_created_by(self):
        assert flatten_property(_prop("created_by", {"id": "u1"}), _names) == "Ada"

    def test_formula(self):
        assert flatten_property(_prop("formula", {"type": "number", "number": 7}), _names) == 7

    def test_rollup_array(self):
        value = {"type": "array", "array": [_prop("number", 1), _prop("number", 2)]}
        assert flatten_property(_prop("rollup", value), _names) == [1, 2]

    def test_files(self):
        value = [
            {"type": "external", "external": {"url": "https://a"}},
            {"type": "file", "file": {"url": "https://b", "expiry_time": "x"}},
        ]
        assert flatten_property(_prop("files", value), _names) == ["https://a", "https://b"]

    def test_unknown_type(self):
        assert flatten_property(_prop("button", {}), _names) is None


class TestFlattenPage:
    def test_row(self):
        page = {
            "id": "row-1",
            "properties": {
                "Name": _prop("title", rich("Task")),
                "Done": _prop("checkbox", False),
            },
        }
        assert flatten_page(page, _names) == {"_id": "row-1", "Name": "Task", "Done": False}

    def test_no_properties(self):
        assert flatten_page({"id": "r"}, _names) == {"_id": "r"}


class TestSchema:
    def test_properties_in_order(self):
        database = {"properties": {"Name": {"type": "title"}, "Tags": {"type": "multi_select"}}}
        assert schema_from_database(database) == [
            SchemaProperty("Name", "title"),
            SchemaProperty("Tags", "multi_select"),
        ]


class TestClampLimit:
    @pytest.mark.parametrize(
        "limit, expected",
        [(None, 100), (0, 100), (-5, 100), (1, 1), (50, 50), (100, 100), (250, 100)],
    )
    def test_clamp(self, limit, expected):
        assert clamp_limit(limit) == expected
