"""Unit tests for data template generators.

Generated templates are rendered through apply_template, the same path the
data fetcher uses.
"""

from dashboard_builder.services.template_generators import (
    create_chart_data_template,
    create_stat_card_template,
    create_table_data_template,
)
from dashboard_builder.services.templating import apply_template

ROWS = [
    {"month": "Jan", "revenue": 100, "cost": 60},
    {"month": "Feb", "revenue": 120, "cost": 70},
]


class TestChartTemplate:
    """Tests for create_chart_data_template."""

    def test_renders_labels_and_datasets(self):
        template = create_chart_data_template("month", ["revenue", "cost"], ["Revenue"])
        result = apply_template(ROWS, template)

        assert result == {
            "labels": ["Jan", "Feb"],
            "datasets": [
                {"label": "Revenue", "data": [100, 120]},
                {"label": "cost", "data": [60, 70]},
            ],
        }

    def test_empty_rows(self):
        template = create_chart_data_template("month", ["revenue"])
        assert apply_template([], template) == {
            "labels": [],
            "datasets": [{"label": "revenue", "data": []}],
        }


class TestTableTemplate:
    """Tests for create_table_data_template."""

    def test_renders_columns_and_rows(self):
        columns = [{"key": "month", "label": "Month"}, {"key": "revenue", "label": "Revenue"}]
        result = apply_template(ROWS, create_table_data_template(columns))

        assert result["columns"] == columns
        assert result["rows"] == [
            {"month": "Jan", "revenue": 100},
            {"month": "Feb", "revenue": 120},
        ]

    def test_quotes_in_values_stay_valid_json(self):
        columns = [{"key": "name", "label": "Name"}]
        result = apply_template([{"name": 'The "best"'}], create_table_data_template(columns))
        assert result["rows"] == [{"name": 'The "best"'}]


class TestStatCardTemplate:
    """Tests for create_stat_card_template."""

    def test_value_with_default_label(self):
        result = apply_template([{"total": 42}], create_stat_card_template("total"))
        assert result == {"value": 42, "label": "Value"}

    def test_label_and_trend(self):
        template = create_stat_card_template("total", "name", "change")

        up = apply_template([{"total": 42, "name": "Orders", "change": 5}], template)
        assert up == {
            "value": 42,
            "label": "Orders",
            "trend": {"value": 5, "direction": "up"},
        }

        down = apply_template([{"total": 1, "name": "Orders", "change": -2}], template)
        assert down["trend"]["direction"] == "down"
