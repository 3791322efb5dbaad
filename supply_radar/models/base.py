"""
Shared base for every record serialized into the dashboard payload.

Python attributes are snake_case; the JSON the dashboard consumes is
camelCase.  All wire models are frozen so a record cannot be mutated after
a fetcher or scoring function produces it: aggregation always builds new
records.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Frozen pydantic model with camelCase aliases for JSON output."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict exactly as the dashboard expects it."""
        return self.model_dump(by_alias=True, mode="json")
