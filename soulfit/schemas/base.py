from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (the web client's names)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
