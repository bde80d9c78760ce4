"""Sync session status and its transition table."""

from enum import Enum


class SessionStatus(Enum):
    """Pipeline stage of a sync session."""

    AWAITING_BANK_AUTH = "awaiting_bank_auth"
    AWAITING_TAN = "awaiting_tan"
    FETCHING_TRANSACTIONS = "fetching_transactions"
    REVIEWING_TRANSACTIONS = "reviewing_transactions"
    IMPORTING_TO_YNAB = "importing_to_ynab"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        return self in [SessionStatus.COMPLETED, SessionStatus.FAILED]

    def can_transition_to(self, target: "SessionStatus") -> bool:
        if self.is_terminal():
            return False
        if target in [SessionStatus.FAILED, SessionStatus.COMPLETED]:
            return True
        return target in _FORWARD_TRANSITIONS.get(self, ())


# Failing or completing is allowed from every non-terminal stage; the table
# lists the remaining stage-to-stage moves. A failed export returns the
# session to review so the user can retry.
_FORWARD_TRANSITIONS: dict[SessionStatus, tuple[SessionStatus, ...]] = {
    SessionStatus.AWAITING_BANK_AUTH: (SessionStatus.AWAITING_TAN,),
    SessionStatus.AWAITING_TAN: (
        SessionStatus.FETCHING_TRANSACTIONS,
        SessionStatus.AWAITING_BANK_AUTH,
    ),
    SessionStatus.FETCHING_TRANSACTIONS: (SessionStatus.REVIEWING_TRANSACTIONS,),
    SessionStatus.REVIEWING_TRANSACTIONS: (SessionStatus.IMPORTING_TO_YNAB,),
    SessionStatus.IMPORTING_TO_YNAB: (SessionStatus.REVIEWING_TRANSACTIONS,),
}
