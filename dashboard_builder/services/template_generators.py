"""
Template Generators

Build data templates for common component shapes from field descriptors.
The generated templates expect `data` to be a list of row dicts (the usual
shape of a SQL source) and render JSON.
"""

import json
from typing import Any


def _field(field: str) -> str:
    """Jinja expression for `row[field]` rendered as a JSON value."""
    return f"row[{json.dumps(field)}] | tojson"


def _each(expression: str) -> str:
    return (
        "{% for row in data %}{{ " + expression + " }}"
        "{% if not loop.last %},{% endif %}{% endfor %}"
    )


def create_chart_data_template(
    label_field: str,
    value_fields: list[str],
    dataset_labels: list[str] | None = None,
) -> str:
    """
    Template producing {"labels": [...], "datasets": [{"label", "data"}, ...]}.
    """
    datasets = []
    for index, field in enumerate(value_fields):
        label = dataset_labels[index] if dataset_labels and index < len(dataset_labels) else field
        datasets.append(
            "    {\n"
            f'      "label": {json.dumps(label)},\n'
            f'      "data": [{_each(_field(field))}]\n'
            "    }"
        )

    return (
        "{\n"
        f'  "labels": [{_each(_field(label_field))}],\n'
        '  "datasets": [\n'
        + ",\n".join(datasets)
        + "\n  ]\n"
        "}"
    )


def create_table_data_template(columns: list[dict[str, Any]]) -> str:
    """
    Template producing {"columns": [...], "rows": [{key: value, ...}, ...]}.
    """
    cells = ", ".join(
        f'{json.dumps(col["key"])}: {{{{ {_field(col["key"])} }}}}' for col in columns
    )
    return (
        "{\n"
        f'  "columns": {json.dumps(columns)},\n'
        '  "rows": [\n'
        "    {% for row in data %}{" + cells + "}"
        "{% if not loop.last %},{% endif %}{% endfor %}\n"
        "  ]\n"
        "}"
    )


def create_stat_card_template(
    value_field: str,
    label_field: str | None = None,
    trend_field: str | None = None,
) -> str:
    """
    Template producing a stat card payload from the first row.
    """
    first = "data[0]"
    label = (
        f"{{{{ {first}[{json.dumps(label_field)}] | tojson }}}}"
        if label_field
        else '"Value"'
    )
    parts = [
        f'  "value": {{{{ {first}[{json.dumps(value_field)}] | tojson }}}}',
        f'  "label": {label}',
    ]
    if trend_field:
        trend = f"{first}[{json.dumps(trend_field)}]"
        parts.append(
            '  "trend": {\n'
            f'    "value": {{{{ {trend} | tojson }}}},\n'
            f'    "direction": "{{% if gt({trend}, 0) %}}up{{% else %}}down{{% endif %}}"\n'
            "  }"
        )
    return "{\n" + ",\n".join(parts) + "\n}"
