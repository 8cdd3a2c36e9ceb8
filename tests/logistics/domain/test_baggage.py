"""Tests for baggage-type set handling."""

import pytest
from logistics.shared.baggage import dump_baggage_types, intersects, parse_baggage_types
from protean.exceptions import ValidationError


class TestParse:
    def test_parses_json_list(self):
        assert parse_baggage_types('["Documents", "Pet"]') == ["Documents", "Pet"]

    def test_accepts_python_list(self):
        assert parse_baggage_types(["Documents"]) == ["Documents"]

    def test_strips_blanks_and_duplicates(self):
        assert parse_baggage_types(["Pet", " Pet ", "", "Box"]) == ["Pet", "Box"]

    def test_empty_values(self):
        assert parse_baggage_types(None) == []
        assert parse_baggage_types("") == []

    def test_non_list_json_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_baggage_types('{"type": "Pet"}')


class TestDump:
    def test_round_trips_normalized_list(self):
        assert dump_baggage_types(["Pet", "Pet"]) == '["Pet"]'

    def test_empty_set_is_rejected_when_required(self):
        with pytest.raises(ValidationError):
            dump_baggage_types([])

    def test_empty_set_allowed_when_optional(self):
        assert dump_baggage_types([], required=False) == "[]"


class TestIntersects:
    def test_shared_type(self):
        assert intersects(["Pet", "Box"], '["Box"]')

    def test_disjoint_sets(self):
        assert not intersects(["Pet"], ["Box"])
