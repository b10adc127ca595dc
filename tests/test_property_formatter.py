"""Tests for app.services.property_formatter."""

import asyncio
import logging

import pytest
from pydantic import ValidationError

from app.models.property import UnknownProperty, parse_property
from app.services.notion_client import NotionAPIError
from app.services.property_formatter import NO_TITLE, UNKNOWN_TYPE, format_static
from fakes import FakeNotionClient, make_reader, page, rich, title_prop, titled_page


def _format(data: dict, client: FakeNotionClient = None) -> str:
    reader = make_reader(client or FakeNotionClient())
    return asyncio.run(reader.formatter.format(parse_property(data)))


# ---------------------------------------------------------------------------
# Static variants
# ---------------------------------------------------------------------------

class TestFormatStatic:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ({"type": "title", "title": rich("Hello") + rich(" world")}, "Hello world"),
            ({"type": "rich_text", "rich_text": rich("Some notes")}, "Some notes"),
            ({"type": "rich_text", "rich_text": []}, ""),
            ({"type": "select", "select": {"name": "Done", "color": "green"}}, "Done"),
            ({"type": "select", "select": None}, ""),
            ({"type": "multi_select", "multi_select": [{"name": "a"}, {"name": "b"}]}, "a, b"),
            ({"type": "status", "status": {"name": "In progress"}}, "In progress"),
            ({"type": "status", "status": None}, ""),
            ({"type": "email", "email": "jo@example.com"}, "jo@example.com"),
            ({"type": "email", "email": None}, ""),
            ({"type": "phone_number", "phone_number": "+31 6 1234"}, "+31 6 1234"),
            ({"type": "url", "url": "https://example.com"}, "https://example.com"),
            ({"type": "url", "url": None}, ""),
            ({"type": "people", "people": [{"id": "u1", "name": "Ann"}, {"id": "u2", "name": "Bo"}]}, "Ann, Bo"),
            ({"type": "people", "people": [{"id": "u1", "name": "Ann"}, {"id": "bot1"}]}, "Ann"),
            ({"type": "people", "people": [{"id": "bot1", "name": None}]}, ""),
            ({"type": "checkbox", "checkbox": True}, "V"),
            ({"type": "checkbox", "checkbox": False}, "X"),
            ({"type": "number", "number": 42}, "42"),
            ({"type": "number", "number": 2.5}, "2.5"),
            ({"type": "number", "number": None}, ""),
            ({"type": "created_time", "created_time": "2024-01-02T10:00:00.000Z"}, "2024-01-02T10:00:00.000Z"),
            ({"type": "last_edited_time", "last_edited_time": "2024-02-03T11:00:00.000Z"}, "2024-02-03T11:00:00.000Z"),
            ({"type": "created_by", "created_by": {"id": "u1", "name": "Ann"}}, "Ann"),
            ({"type": "last_edited_by", "last_edited_by": {"id": "u2"}}, ""),
            ({"type": "verification", "verification": {"state": "verified"}}, "verified"),
        ],
    )
    def test_variant(self, data, expected):
        assert format_static(parse_property({"id": "p", **data})) == expected

    def test_date_uses_start_only(self):
        data = {
            "type": "date",
            "date": {"start": "2024-05-01", "end": "2024-05-03", "time_zone": "Europe/Amsterdam"},
        }
        assert format_static(parse_property(data)) == "2024-05-01"

    def test_empty_date(self):
        assert format_static(parse_property({"type": "date", "date": None})) == ""

    def test_unknown_type_returns_sentinel_and_warns(self, caplog):
        prop = parse_property({"id": "f", "type": "formula", "formula": {"type": "string"}})

        with caplog.at_level(logging.WARNING, logger="app.services.property_formatter"):
            result = format_static(prop)

        assert isinstance(prop, UnknownProperty)
        assert result == UNKNOWN_TYPE
        assert "formula" in caplog.text

    def test_missing_type_is_unknown(self):
        assert format_static(parse_property({"id": "x"})) == UNKNOWN_TYPE

    def test_malformed_shape_raises(self):
        with pytest.raises(ValidationError):
            parse_property({"type": "multi_select", "multi_select": "not-a-list"})

    def test_async_format_delegates_for_static_variants(self):
        assert _format({"type": "select", "select": {"name": "Todo"}}) == "Todo"


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------

class TestFormatRelation:
    def test_related_record_without_title_property(self):
        client = FakeNotionClient(pages={"r1": page("r1", {})})

        assert _format({"type": "relation", "relation": [{"id": "r1"}]}, client) == NO_TITLE

    def test_related_record_title(self):
        client = FakeNotionClient()
        titled_page(client, "r1", "Acme")

        assert _format({"type": "relation", "relation": [{"id": "r1"}]}, client) == "Acme"

    def test_multiple_related_records_joined_in_order(self):
        client = FakeNotionClient(delays={("page", "r1"): 0.03})
        titled_page(client, "r1", "Acme")
        titled_page(client, "r2", "Globex")

        result = _format({"type": "relation", "relation": [{"id": "r1"}, {"id": "r2"}]}, client)

        assert result == "Acme, Globex"

    def test_first_title_typed_property_is_used(self):
        client = FakeNotionClient(
            pages={
                "r1": page(
                    "r1",
                    {
                        "Notes": {"id": "n1", "type": "rich_text", "rich_text": rich("skip")},
                        "Company": title_prop("Initech", prop_id="abc"),
                    },
                )
            },
            property_values={("property", "r1", "abc"): {"object": "list", "results": [
                {"object": "property_item", "type": "title", "title": {"plain_text": "Initech"}}
            ]}},
        )

        assert _format({"type": "relation", "relation": [{"id": "r1"}]}, client) == "Initech"
        assert ("property", "r1", "abc") in client.calls

    def test_empty_title_value_falls_back_to_sentinel(self):
        client = FakeNotionClient(
            pages={"r1": page("r1", {"Name": title_prop("")})},
            property_values={("property", "r1", "title"): {"object": "list", "results": []}},
        )

        assert _format({"type": "relation", "relation": [{"id": "r1"}]}, client) == NO_TITLE

    def test_empty_relation(self):
        assert _format({"type": "relation", "relation": []}) == ""

    def test_failed_lookup_propagates(self):
        client = FakeNotionClient(failures={("page", "r1")}, pages={"r1": page("r1", {})})

        with pytest.raises(NotionAPIError):
            _format({"type": "relation", "relation": [{"id": "r1"}]}, client)

    def test_format_static_rejects_relations(self):
        with pytest.raises(TypeError):
            format_static(parse_property({"type": "relation", "relation": []}))
