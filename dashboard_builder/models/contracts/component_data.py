"""
Component payload schemas.

The mutation layer stores `component.data` as-is. Renderers call
parse_component_data() to get a typed payload for the component type;
invalid payloads are reported there, not when the data is written.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import ConfigDict

from dashboard_builder.models.contracts.base import CamelModel


class _Payload(CamelModel):
    model_config = ConfigDict(extra="allow")


class ChartData(_Payload):
    """Chart library option object (series, axes, legend...). Free-form."""


class TableColumn(CamelModel):
    key: str
    label: str
    align: Literal["left", "center", "right"] | None = None


class TableData(_Payload):
    columns: list[TableColumn]
    rows: list[dict[str, Any]]


class StatCardTrend(CamelModel):
    value: float | str
    direction: Literal["up", "down", "neutral"] = "neutral"
    label: str | None = None


class StatCardData(_Payload):
    value: float | str
    label: str
    prefix: str | None = None
    suffix: str | None = None
    icon: str | None = None
    color: str | None = None
    icon_color: str | None = None
    description: str | None = None
    gradient: str | None = None
    trend: StatCardTrend | None = None


class MetricCardData(_Payload):
    value: float | str
    label: str
    unit: str | None = None
    change: float | None = None
    target: float | None = None


class GaugeData(_Payload):
    value: float
    min: float = 0
    max: float = 100
    label: str | None = None
    unit: str | None = None


class HeatmapData(_Payload):
    x_labels: list[str]
    y_labels: list[str]
    values: list[list[float]]


ComponentPayload = ChartData | TableData | StatCardData | MetricCardData | GaugeData | HeatmapData

PAYLOAD_MODELS: dict[str, type[_Payload]] = {
    "chart": ChartData,
    "table": TableData,
    "stat-card": StatCardData,
    "metric-card": MetricCardData,
    "gauge": GaugeData,
    "heatmap": HeatmapData,
}


def parse_component_data(component_type: str, data: Any) -> ComponentPayload:
    """
    Validate a component payload against the schema for its type.

    Raises:
        KeyError: Unknown component type
        pydantic.ValidationError: Payload does not match the type's schema
    """
    return PAYLOAD_MODELS[component_type].model_validate(data)
