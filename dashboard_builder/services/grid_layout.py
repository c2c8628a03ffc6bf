"""
Grid Geometry

Pure functions over a CSS grid-template-areas description:
- Extract and validate area names
- Check area occupancy against the dashboard components
- Validate candidate layouts (rectangular rows, rectangular areas)
- Derive used/available area statistics

Every function here is total: malformed input yields False or an error
list, never an exception. Callers decide whether to reject a mutation.
"""

import re
from typing import Any, Iterable, Mapping

from dashboard_builder.models.contracts.dashboard import (
    DashboardComponent,
    DashboardState,
    GridLayout,
    GridStats,
    GridValidationResult,
)

# CSS null cell token: one or more dots
_PLACEHOLDER_RE = re.compile(r"^\.+$")

# Custom ident: no leading digit, no whitespace or quotes
_AREA_NAME_RE = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")

_QUOTES = "\"'"


def is_placeholder(token: str) -> bool:
    return bool(_PLACEHOLDER_RE.match(token))


def tokenize_row(row: Any) -> list[str]:
    """Split a row template into cell tokens."""
    if not isinstance(row, str):
        return []
    return row.split()


def normalize_template_areas(template_areas: Iterable[Any]) -> list[Any]:
    """
    Strip CSS quoting and surrounding whitespace from row templates.

    Agents frequently send rows the way they appear in CSS
    ('"header header"'), which would otherwise become part of the token.
    Non-string rows pass through unchanged for validation to reject.
    """
    normalized: list[Any] = []
    for row in template_areas:
        if not isinstance(row, str):
            normalized.append(row)
            continue
        text = row.strip()
        if text[:1] in _QUOTES:
            text = text[1:]
        if text[-1:] in _QUOTES:
            text = text[:-1]
        normalized.append(text.strip())
    return normalized


def extract_grid_areas(template_areas: Iterable[Any] | None) -> list[str]:
    """
    Extract unique area names in first-seen order, excluding placeholders.
    """
    seen: dict[str, None] = {}
    for row in template_areas or []:
        for token in tokenize_row(row):
            if not is_placeholder(token):
                seen.setdefault(token, None)
    return list(seen)


def is_valid_grid_area(area: Any, template_areas: Iterable[Any] | None) -> bool:
    if not isinstance(area, str) or not area or is_placeholder(area):
        return False
    return area in extract_grid_areas(template_areas)


def find_component_in_area(
    area: str,
    components: Mapping[str, DashboardComponent],
    exclude_id: str | None = None,
) -> DashboardComponent | None:
    """Return the component occupying `area`, ignoring `exclude_id`."""
    for component in components.values():
        if component.id != exclude_id and component.grid_area == area:
            return component
    return None


def is_grid_area_occupied(
    area: str, state: DashboardState, exclude_id: str | None = None
) -> bool:
    return find_component_in_area(area, state.components, exclude_id) is not None


def _layout_fields(candidate: Any) -> tuple[Any, Any, Any, Any]:
    if isinstance(candidate, GridLayout):
        return candidate.columns, candidate.rows, candidate.gap, candidate.template_areas
    if isinstance(candidate, Mapping):
        template_areas = candidate.get("templateAreas", candidate.get("template_areas"))
        return candidate.get("columns"), candidate.get("rows"), candidate.get("gap"), template_areas
    return None, None, None, None


def _check_rectangular_areas(matrix: list[list[str]]) -> list[str]:
    """Each area's cells must fill exactly one rectangle."""
    cells: dict[str, list[tuple[int, int]]] = {}
    for r, row in enumerate(matrix):
        for c, token in enumerate(row):
            if not is_placeholder(token):
                cells.setdefault(token, []).append((r, c))

    errors: list[str] = []
    for name, positions in cells.items():
        rows = [r for r, _ in positions]
        cols = [c for _, c in positions]
        top, bottom = min(rows), max(rows)
        left, right = min(cols), max(cols)
        filled = all(
            matrix[r][c] == name
            for r in range(top, bottom + 1)
            for c in range(left, right + 1)
        )
        if not filled:
            errors.append(
                f'Grid area "{name}" does not form a single rectangle '
                f"(rows {top + 1}-{bottom + 1}, columns {left + 1}-{right + 1})"
            )
    return errors


def validate_grid_layout(candidate: Any) -> GridValidationResult:
    """
    Validate a candidate layout.

    Checks:
    - columns, rows and gap are non-empty strings
    - templateAreas is a non-empty list of non-empty row strings
    - area names are valid identifiers
    - every row has the same number of cells
    - every named area forms a single filled rectangle
    """
    columns, rows, gap, template_areas = _layout_fields(candidate)
    errors: list[str] = []

    for label, value in (("columns", columns), ("rows", rows), ("gap", gap)):
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{label} must be a non-empty string")

    if not isinstance(template_areas, (list, tuple)) or not template_areas:
        errors.append("templateAreas must be a non-empty list of row strings")
        return GridValidationResult(valid=False, errors=errors)

    matrix: list[list[str]] = []
    for index, row in enumerate(template_areas, start=1):
        tokens = tokenize_row(row)
        if not tokens:
            errors.append(f"Row {index} is empty")
        for token in tokens:
            if not is_placeholder(token) and not _AREA_NAME_RE.match(token):
                errors.append(f'Row {index} has invalid area name "{token}"')
        matrix.append(tokens)

    widths = {len(tokens) for tokens in matrix if tokens}
    if len(widths) > 1:
        expected = next(len(tokens) for tokens in matrix if tokens)
        for index, tokens in enumerate(matrix, start=1):
            if tokens and len(tokens) != expected:
                errors.append(
                    f"Row {index} has {len(tokens)} columns, expected {expected}"
                )
    elif not any(not tokens for tokens in matrix):
        errors.extend(_check_rectangular_areas(matrix))

    return GridValidationResult(valid=not errors, errors=errors)


def get_grid_stats(state: DashboardState) -> GridStats:
    areas = extract_grid_areas(state.grid.template_areas)
    used = {c.grid_area for c in state.components.values()}
    available = [area for area in areas if area not in used]
    return GridStats(
        total_areas=len(areas),
        used_areas=len(areas) - len(available),
        available_areas=len(available),
        available_area_names=available,
    )
