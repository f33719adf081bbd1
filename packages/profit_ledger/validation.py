"""User-input validation for new and edited entries.

The presentation layer hands the store loose values (the amount often comes
straight from a text field). :class:`EntryDraft` is the authoritative check;
:func:`validate_draft` turns pydantic's errors into one
:class:`EntryValidationError` whose message names every offending field.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .categories import is_known_category
from .dates import parse_date
from .models import EntryType

# Field names as the caller spells them, for error messages.
_FIELD_LABELS = {
    "date": "date",
    "amount": "amount",
    "category_id": "category",
    "categoryId": "category",
    "type": "type",
    "memo": "memo",
    "entry_id": "entry id",
    "entryId": "entry id",
}


class EntryValidationError(ValueError):
    """Rejected user input. ``errors`` maps field label -> reason."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid entry: {detail}")


class EntryDraft(BaseModel):
    """A new or edited entry as supplied by the presentation layer.

    ``entry_id`` is set when editing an existing entry. ``date`` is validated
    and normalized to ISO form when present; the store also accepts the date as
    a separate argument.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    amount: int
    category_id: str = Field(alias="categoryId")
    type: EntryType = "expense"
    memo: str = ""
    entry_id: str | None = Field(default=None, alias="entryId")
    date: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, v: Any) -> int:
        if isinstance(v, bool):
            raise ValueError("must be a number")
        if isinstance(v, str):
            try:
                v = int(v.strip().replace(",", ""))
            except ValueError:
                raise ValueError("must be a whole number") from None
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError("must be a whole number")
            v = int(v)
        if not isinstance(v, int):
            raise ValueError("must be a number")
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("category_id", mode="before")
    @classmethod
    def _known_category(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("is required")
        if isinstance(v, str):
            v = v.strip()
        if not is_known_category(v):
            raise ValueError(f"unknown category {v!r}")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("entry_id")
    @classmethod
    def _blank_id(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("date")
    @classmethod
    def _iso_date(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return parse_date(v).isoformat()


def _label(loc: tuple[Any, ...]) -> str:
    if not loc:
        return "entry"
    head = str(loc[0])
    return _FIELD_LABELS.get(head, head)


def _reason(err: Mapping[str, Any]) -> str:
    if err.get("type") == "missing":
        return "is required"
    msg = str(err.get("msg") or "is invalid")
    # pydantic prefixes custom errors with "Value error, "
    return msg.removeprefix("Value error, ")


def validate_draft(data: EntryDraft | Mapping[str, Any]) -> EntryDraft:
    """Return a validated :class:`EntryDraft` or raise :class:`EntryValidationError`."""

    if isinstance(data, EntryDraft):
        return data
    try:
        return EntryDraft.model_validate(dict(data))
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for err in exc.errors():
            errors.setdefault(_label(tuple(err.get("loc") or ())), _reason(err))
        raise EntryValidationError(errors) from exc


__all__ = [
    "EntryDraft",
    "EntryValidationError",
    "validate_draft",
]
