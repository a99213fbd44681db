"""Shared base for generator schemas exchanged in camelCase JSON."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both camelCase (model output, HTTP) and snake_case field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, the shape the prompts ask models for."""
        return self.model_dump(by_alias=True, exclude_none=True)
