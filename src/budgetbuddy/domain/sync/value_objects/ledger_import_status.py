"""Per-transaction outcome of the ledger export."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NotAttempted(BaseModel):
    kind: Literal["not_attempted"] = "not_attempted"

    model_config = ConfigDict(frozen=True)


class Imported(BaseModel):
    kind: Literal["imported"] = "imported"
    ledger_transaction_id: str | None = None

    model_config = ConfigDict(frozen=True)


class Rejected(BaseModel):
    """The ledger did not create the transaction.

    ``duplicate_import_id`` is set when the ledger recognised the import ID
    from an earlier export; otherwise ``message`` explains the rejection.
    """

    kind: Literal["rejected"] = "rejected"
    duplicate_import_id: str | None = None
    message: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate_import_id is not None


LedgerImportStatus = Annotated[
    Union[NotAttempted, Imported, Rejected],
    Field(discriminator="kind"),
]
