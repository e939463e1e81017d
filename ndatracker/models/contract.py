"""
Contract data models.

Field names are snake_case in Python and camelCase on the wire, so the
persisted collection reads ``effectiveDate``, ``expiryDate``,
``confidentialityPeriod`` and ``dateAdded``.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ContractFields(BaseModel):
    """The user-editable fields shared by drafts and committed records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    title: str = Field(default="", description="Contract title, required to commit")
    effective_date: Optional[date] = Field(default=None, description="Start date")
    expiry_date: Optional[date] = Field(default=None, description="Expiry date")
    counterparty: str = Field(default="", description="Other party to the contract")
    limitations: str = Field(default="", description="Key limitations")
    obligations: str = Field(default="", description="Key obligations")
    confidentiality_period: str = Field(
        default="", description="Free-text confidentiality period"
    )
    notes: str = Field(default="", description="Additional notes")

    @field_validator("effective_date", "expiry_date", mode="before")
    @classmethod
    def _blank_date_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator(
        "title",
        "counterparty",
        "limitations",
        "obligations",
        "confidentiality_period",
        "notes",
        mode="before",
    )
    @classmethod
    def _none_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def has_title(self) -> bool:
        """True when the title is non-blank (whitespace-only counts as blank)."""
        return bool(self.title.strip())

    def field_values(self) -> Dict[str, Any]:
        """Editable field values keyed by Python name."""
        return {name: getattr(self, name) for name in DRAFT_FIELDS}


class Draft(ContractFields):
    """An uncommitted set of contract fields with no identity yet."""

    def is_empty(self) -> bool:
        """True when no field carries a value."""
        return all(
            value is None or (isinstance(value, str) and not value.strip())
            for value in self.field_values().values()
        )


class ContractRecord(ContractFields):
    """A committed contract. ``id`` and ``date_added`` never change."""

    id: str = Field(description="Opaque unique identifier")
    date_added: datetime = Field(description="Commit time of the create")

    def to_draft(self) -> Draft:
        """Working copy of this record's editable fields."""
        return Draft(**self.field_values())

    def replaced_by(self, draft: Draft) -> "ContractRecord":
        """A record with every editable field taken from ``draft``."""
        return ContractRecord(
            id=self.id, date_added=self.date_added, **draft.field_values()
        )


DRAFT_FIELDS = tuple(ContractFields.model_fields.keys())
