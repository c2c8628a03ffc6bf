"""
Template Rendering

Renders component data templates with Jinja2. Templates run in a sandboxed
environment because they are authored by the agent at runtime.

Helpers are registered once at import time and exposed both as globals and
as filters, so either form works:

    {{ formatNumber(row.total, 1) }}
    {{ row.total | formatNumber(1) }}
    {% if gt(data[0].change, 0) %}up{% else %}down{% endif %}
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable

from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment

from dashboard_builder.core.exceptions import TemplateTransformError

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def gt(a: Any, b: Any) -> bool:
    return a > b


def lt(a: Any, b: Any) -> bool:
    return a < b


def eq(a: Any, b: Any) -> bool:
    return a == b


def add(a: Any, b: Any) -> Any:
    return a + b


def subtract(a: Any, b: Any) -> Any:
    return a - b


def multiply(a: Any, b: Any) -> Any:
    return a * b


def divide(a: Any, b: Any) -> Any:
    """Division that yields 0 for a zero divisor."""
    return a / b if b != 0 else 0


def format_number(value: Any, decimals: int = 2) -> str:
    return f"{float(value):.{int(decimals)}f}"


def format_percent(value: Any) -> str:
    """0.1234 -> '12.3%'"""
    return f"{float(value) * 100:.1f}%"


def format_currency(value: Any, currency: str = "$") -> str:
    number = round(float(value), 3)
    if number.is_integer():
        return f"{currency}{int(number):,}"
    return f"{currency}{number:,}"


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds, as produced by JavaScript clients
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def format_date(value: Any, format: str = "short") -> str:
    """
    Format a date as short (1/5/2024), long (January 5, 2024) or ISO.

    Unparseable input is returned unchanged as a string.
    """
    parsed = _to_datetime(value)
    if parsed is None:
        return str(value)
    if format == "short":
        return f"{parsed.month}/{parsed.day}/{parsed.year}"
    if format == "long":
        return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"
    return parsed.isoformat()


# Process-wide helper registry: name -> deterministic function
TEMPLATE_HELPERS: dict[str, Callable[..., Any]] = {
    "gt": gt,
    "lt": lt,
    "eq": eq,
    "add": add,
    "subtract": subtract,
    "multiply": multiply,
    "divide": divide,
    "formatNumber": format_number,
    "formatPercent": format_percent,
    "formatCurrency": format_currency,
    "formatDate": format_date,
}


def _create_environment() -> SandboxedEnvironment:
    env = SandboxedEnvironment(autoescape=False, trim_blocks=False)
    env.globals.update(TEMPLATE_HELPERS)
    env.filters.update(TEMPLATE_HELPERS)
    env.policies["json.dumps_kwargs"] = {"sort_keys": False}
    return env


_environment = _create_environment()


# =============================================================================
# Rendering
# =============================================================================


def render_template(template: str, context: dict[str, Any]) -> str:
    """
    Compile and render `template` against `context`.

    Raises:
        TemplateTransformError: Syntax or render failure
    """
    try:
        compiled = _environment.from_string(template)
        return compiled.render(**context)
    except TemplateError as e:
        raise TemplateTransformError(f"Template transform failed: {e}") from e
    except (TypeError, ValueError, ArithmeticError, AttributeError, KeyError) as e:
        # Helper failures (e.g. formatNumber on a string)
        raise TemplateTransformError(f"Template transform failed: {e}") from e


def apply_template(
    data: Any, template: str, extra_context: dict[str, Any] | None = None
) -> Any:
    """
    Render `template` with `data` in context and parse JSON-looking output.

    Output starting with `{` or `[` is parsed as JSON; if that fails the
    rendered string is returned instead.
    """
    context = {"data": data, **(extra_context or {})}
    rendered = render_template(template, context).strip()

    if rendered.startswith("{") or rendered.startswith("["):
        try:
            return json.loads(rendered)
        except json.JSONDecodeError:
            logger.debug("Template output looked like JSON but did not parse; keeping string")
            return rendered

    return rendered
