"""Shared request/response model bases.

Bodies are exchanged in camelCase; snake_case keys are accepted on input.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class PatchModel(CamelModel):
    """Partial update: only the listed fields may change, unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Field may not be null")
    return value


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
