"""Uploader block attributes as saved by the block editor."""

import math
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_TITLE = "Upscale Your Image"
DEFAULT_MAX_FILE_SIZE_MB = 10


class BlockAttributes(BaseModel):
    """Attributes of one uploader block instance.

    Field aliases match the editor's camelCase keys (``maxFileSize``,
    ``showTermsLink``); snake_case names are accepted too. A title of None
    means "use the translated default".
    """

    title: Optional[str] = None
    description: str = ""
    max_file_size: int = Field(DEFAULT_MAX_FILE_SIZE_MB, alias="maxFileSize", ge=1)
    show_terms_link: bool = Field(True, alias="showTermsLink")

    model_config = {"populate_by_name": True}

    @field_validator("max_file_size", mode="before")
    @classmethod
    def coerce_file_size(cls, v: Any) -> Any:
        """The editor may store numbers as strings or floats; keep the integer part.

        Missing, unparseable or non-positive sizes fall back to the default.
        """
        if v is None or isinstance(v, bool):
            return DEFAULT_MAX_FILE_SIZE_MB
        if isinstance(v, str):
            try:
                v = float(v.strip())
            except ValueError:
                return DEFAULT_MAX_FILE_SIZE_MB
        if isinstance(v, (int, float)) and math.isfinite(v):
            size = int(v)
            return size if size >= 1 else DEFAULT_MAX_FILE_SIZE_MB
        return v

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @classmethod
    def from_block(cls, attributes: Optional[Mapping[str, Any]]) -> "BlockAttributes":
        return cls.model_validate(dict(attributes or {}))
