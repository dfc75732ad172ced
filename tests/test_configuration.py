"""Tests for TableConfiguration: columns, visibility and row values."""

from unittest.mock import Mock

import pytest

from telemetry_table.core.columns import Column
from telemetry_table.core.configuration import TableConfiguration
from telemetry_table.core.types import DomainObject, LimitViolation, TelemetryMetadatum

METADATA = [
    TelemetryMetadatum(key="range1", name="Range 1"),
    TelemetryMetadatum(key="range2", name="Range 2"),
    TelemetryMetadatum(key="domain1", name="Domain 1", hints={"x": 1}, format="utc"),
    TelemetryMetadatum(key="domain2", name="Domain 2", hints={"x": 2}, format="utc"),
]

DATUM = {"range1": "range 1 value", "range2": "range 2 value", "domain1": 0, "domain2": 1}


def _persisting(columns):
    return DomainObject(identifier="table", configuration={"table": {"columns": columns}})


@pytest.fixture
def formatter():
    formatter = Mock()
    formatter.format.side_effect = lambda value: value
    return formatter


@pytest.fixture
def table(formatter):
    return TableConfiguration(DomainObject(identifier="table"), lambda format_id: formatter)


def _column(title):
    return Column(TelemetryMetadatum(key=title.lower(), name=title))


class TestAddColumn:
    def test_without_index_appends(self, table):
        first, second, third = _column("First"), _column("Second"), _column("Third")
        for column in (first, second, third):
            table.add_column(column)
        assert table.columns == [first, second, third]

    def test_with_index_inserts_at_position(self, table):
        first, second, third = _column("First"), _column("Second"), _column("Third")
        table.add_column(first)
        table.add_column(third)
        table.add_column(second, 1)
        assert table.columns == [first, second, third]


class TestPopulatedTable:
    @pytest.fixture(autouse=True)
    def populate(self, table):
        table.populate_columns(METADATA)

    def test_populates_columns(self, table):
        assert len(table.columns) == 4

    def test_headers_follow_column_order(self, table):
        assert table.get_headers() == ["Range 1", "Range 2", "Domain 1", "Domain 2"]

    def test_default_configuration_has_every_column_visible(self, table):
        configuration = table.build_column_configuration()
        assert configuration == {title: True for title in table.get_headers()}

    def test_row_has_a_cell_for_every_column(self, table, formatter):
        row = table.get_row_values(None, DATUM)
        assert set(row) == set(table.get_headers())
        assert row["Range 1"].text == "range 1 value"
        assert row["Domain 2"].value == 1
        assert formatter.format.called

    def test_limit_violation_sets_css_class(self, table):
        def evaluator(record, key):
            return LimitViolation(css_class="s-limit-upr") if key == "range2" else None

        row = table.get_row_values(evaluator, DATUM)
        assert row["Range 2"].css_class == "s-limit-upr"
        assert row["Range 1"].css_class is None

    def test_bad_field_only_invalidates_its_cell(self, table):
        row = table.get_row_values(None, {"range1": "ok", "domain1": 0, "domain2": 1})
        assert row["Range 1"].valid
        assert not row["Range 2"].valid
        assert row["Range 2"].text == ""
        assert row["Range 2"].css_class == "invalid"

    def test_formatter_failure_is_contained(self, table, formatter):
        formatter.format.side_effect = lambda value: 1 / 0 if value == 0 else value
        row = table.get_row_values(None, DATUM)
        assert not row["Domain 1"].valid
        assert row["Domain 2"].valid

    def test_populate_is_idempotent(self, table):
        before = table.build_column_configuration()
        table.populate_columns(METADATA)
        assert table.build_column_configuration() == before


class TestPersistedConfiguration:
    def test_persisted_override_over_two_columns(self, formatter):
        table = TableConfiguration(_persisting({"Range 1": False}), lambda f: formatter)
        table.populate_columns(METADATA[:2])
        assert table.build_column_configuration() == {"Range 1": False, "Range 2": True}

    def test_unknown_persisted_titles_are_ignored(self, formatter):
        table = TableConfiguration(_persisting({"Gone": False, "Range 2": False}), lambda f: formatter)
        table.populate_columns(METADATA[:2])
        assert table.build_column_configuration() == {"Range 1": True, "Range 2": False}

    def test_visible_headers_keep_column_order(self, formatter):
        table = TableConfiguration(_persisting({"Range 2": False}), lambda f: formatter)
        table.populate_columns(METADATA)
        assert table.visible_headers() == ["Range 1", "Domain 1", "Domain 2"]

    def test_new_stored_model_reapplies_overrides(self, table):
        table.populate_columns(METADATA[:2])
        table.set_domain_object(_persisting({"Range 1": False}))
        assert table.build_column_configuration()["Range 1"] is False
