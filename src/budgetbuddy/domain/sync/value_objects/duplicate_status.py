"""Duplicate detection outcome for a single transaction."""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class DuplicateMatchDetails(BaseModel):
    """Which checks fired while comparing against the ledger.

    Kept on every outcome so a reviewer can see why a transaction was (or
    was not) flagged.
    """

    transaction_reference: str
    reference_found: bool = False
    import_id_found: bool = False
    fuzzy_match_date: date | None = None
    fuzzy_match_amount: Decimal | None = None
    fuzzy_match_payee: str | None = None

    model_config = ConfigDict(frozen=True)


class NotDuplicate(BaseModel):
    kind: Literal["not_duplicate"] = "not_duplicate"
    details: DuplicateMatchDetails

    model_config = ConfigDict(frozen=True)


class PossibleDuplicate(BaseModel):
    kind: Literal["possible_duplicate"] = "possible_duplicate"
    reason: str
    details: DuplicateMatchDetails

    model_config = ConfigDict(frozen=True)


class ConfirmedDuplicate(BaseModel):
    kind: Literal["confirmed_duplicate"] = "confirmed_duplicate"
    reference: str
    details: DuplicateMatchDetails

    model_config = ConfigDict(frozen=True)


DuplicateStatus = Annotated[
    Union[NotDuplicate, PossibleDuplicate, ConfirmedDuplicate],
    Field(discriminator="kind"),
]
