"""Unit tests for template rendering and helpers."""

import pytest

from dashboard_builder.core.exceptions import TemplateTransformError
from dashboard_builder.services.templating import (
    TEMPLATE_HELPERS,
    apply_template,
    divide,
    format_currency,
    format_date,
    format_number,
    format_percent,
    render_template,
)


class TestHelpers:
    """Tests for the registered template helpers."""

    def test_registry_names(self):
        assert set(TEMPLATE_HELPERS) == {
            "gt", "lt", "eq", "add", "subtract", "multiply", "divide",
            "formatNumber", "formatPercent", "formatCurrency", "formatDate",
        }

    def test_divide_by_zero_is_zero(self):
        assert divide(10, 0) == 0
        assert divide(10, 4) == 2.5

    def test_format_number(self):
        assert format_number(3.14159) == "3.14"
        assert format_number("2", 1) == "2.0"

    def test_format_percent(self):
        assert format_percent(0.1234) == "12.3%"

    def test_format_currency(self):
        assert format_currency(1234) == "$1,234"
        assert format_currency(1234.5) == "$1,234.5"
        assert format_currency(10, "€") == "€10"

    def test_format_date(self):
        assert format_date("2024-01-05T10:00:00Z") == "1/5/2024"
        assert format_date("2024-01-05", "long") == "January 5, 2024"

    def test_format_date_unparseable_returns_input(self):
        assert format_date("not a date") == "not a date"


class TestRenderTemplate:
    """Tests for render_template."""

    def test_helpers_as_globals(self):
        assert render_template("{{ formatNumber(value, 1) }}", {"value": 2.26}) == "2.3"

    def test_helpers_as_filters(self):
        assert render_template("{{ value | formatPercent }}", {"value": 0.5}) == "50.0%"

    def test_comparison_helper_in_condition(self):
        template = "{% if gt(change, 0) %}up{% else %}down{% endif %}"
        assert render_template(template, {"change": 3}) == "up"
        assert render_template(template, {"change": -1}) == "down"

    def test_syntax_error_raises_transform_error(self):
        with pytest.raises(TemplateTransformError) as exc_info:
            render_template("{% for x in %}", {})
        assert exc_info.value.message.startswith("Template transform failed")

    def test_helper_failure_raises_transform_error(self):
        with pytest.raises(TemplateTransformError):
            render_template("{{ formatNumber(value) }}", {"value": "abc"})


class TestApplyTemplate:
    """Tests for apply_template."""

    def test_json_output_is_parsed(self):
        template = '{"labels": [{% for row in data %}{{ row.name | tojson }}{% if not loop.last %},{% endif %}{% endfor %}]}'
        result = apply_template([{"name": "a"}, {"name": "b"}], template)
        assert result == {"labels": ["a", "b"]}

    def test_plain_output_is_string(self):
        assert apply_template({"n": 3}, "Total: {{ data.n }}") == "Total: 3"

    def test_invalid_json_output_falls_back_to_string(self):
        assert apply_template([], "{ not json }") == "{ not json }"

    def test_extra_context_is_available(self):
        result = apply_template(5, "{{ data }} {{ unit }}", {"unit": "kg"})
        assert result == "5 kg"
