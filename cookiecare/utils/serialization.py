"""Shared serialization helpers for the camelCase JSON surface.

Scan results are modelled in snake_case and exposed in the
camelCase shape the report UI consumes.
"""

from __future__ import annotations

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"screenshot_base64"``.

    Returns:
        The camelCase equivalent, e.g. ``"screenshotBase64"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


class CamelModel(pydantic.BaseModel):
    """Base model that reads and writes camelCase aliases."""

    model_config = pydantic.ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, object]:
        """Dump to plain JSON-compatible data using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
