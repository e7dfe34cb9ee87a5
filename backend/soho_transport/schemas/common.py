"""
Shared schema helpers.

Request and response bodies use camelCase on the wire and snake_case in
Python. Field-level messages name the camelCase field, e.g.
``"phoneNumber must contain numbers only."``.
"""

from datetime import date
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

NUMERIC_ONLY = re.compile(r"^\d+$")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CamelResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clean_text(value: Any, field: str, *, max_length: int = 255, min_length: int = 1,
               required: bool = True, length_message: Optional[str] = None) -> Optional[str]:
    """Trim a string field and enforce presence and length"""
    if is_blank(value):
        if required:
            raise ValueError(f"{field} is required.")
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string.")

    value = value.strip()
    if len(value) < min_length or len(value) > max_length:
        raise ValueError(length_message or f"{field} is too long.")
    return value


def clean_digits(value: Any, field: str, *, required: bool = True) -> Optional[str]:
    """Phone-like field: digits only, 9 to 20 characters"""
    if is_blank(value):
        if required:
            raise ValueError(f"{field} is required.")
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string.")

    value = value.strip()
    if not NUMERIC_ONLY.match(value):
        raise ValueError(f"{field} must contain numbers only.")
    if not 9 <= len(value) <= 20:
        raise ValueError(f"{field} length is invalid.")
    return value


def clean_date(value: Any, field: str, *, required: bool = True,
               message: Optional[str] = None) -> Optional[date]:
    """Accept a date or an ISO-8601 date string (a datetime string keeps its date part)"""
    if is_blank(value):
        if required:
            raise ValueError(f"{field} is required.")
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10]) if "T" in text else date.fromisoformat(text)
        except ValueError:
            pass
    raise ValueError(message or f"{field} must be a valid date.")
