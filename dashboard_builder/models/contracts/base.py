"""
Base models and helpers for dashboard contracts.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for all wire-facing contracts.

    Tool parameters and stored snapshots use camelCase keys (gridArea,
    templateAreas); Python code uses snake_case attributes. Both forms are
    accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.utcnow().isoformat() + "Z"
