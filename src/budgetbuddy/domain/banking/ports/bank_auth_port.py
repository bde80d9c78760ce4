"""Bank authentication port (interface).

This port defines the contract for banks that authenticate with a token
exchange followed by an out-of-band TAN challenge. Infrastructure adapters
implement it for a concrete bank API.
"""

from abc import ABC, abstractmethod

from budgetbuddy.domain.banking.value_objects import (
    AuthHandshake,
    BankAccount,
    BankCredentials,
    BankSession,
    BankTransaction,
    DateRange,
)


class BankAuthPort(ABC):
    """Abstract interface for a challenge-response bank client.

    The adapter owns no state beyond a single handshake: everything needed
    for the next step is returned to the caller inside value objects.
    """

    @abstractmethod
    async def begin_handshake(self, credentials: BankCredentials) -> AuthHandshake:
        """
        Exchange credentials for a token pair and trigger a TAN challenge.

        Parameters
        ----------
        credentials
            OAuth client registration plus online-banking login

        Returns
        -------
        Handshake holding request info, first-factor tokens and the challenge

        Raises
        ------
        InvalidCredentialsError
            If the bank refuses the login
        UnsupportedChallengeError
            If the challenge kind is not push-TAN
        BankNetworkError
            On any other non-2xx response
        BankInvalidResponseError
            If a response cannot be decoded
        """

    @abstractmethod
    async def request_challenge(self, handshake: AuthHandshake) -> AuthHandshake:
        """
        Issue a fresh TAN challenge with the handshake's existing tokens.

        Used after TanRejectedError or TanChallengeExpiredError so the
        user need not re-enter credentials.

        Raises
        ------
        SessionExpiredError
            If the first-factor tokens are no longer valid
        UnsupportedChallengeError
            If the challenge kind is not push-TAN
        """

    @abstractmethod
    async def confirm_challenge(self, handshake: AuthHandshake) -> BankSession:
        """
        Confirm that the user approved the push-TAN out-of-band.

        Returns
        -------
        Activated session with the extended token pair

        Raises
        ------
        TanRejectedError
            If the bank refuses the confirmation
        TanChallengeExpiredError
            If the challenge timed out
        """

    @abstractmethod
    async def fetch_transactions(
        self,
        session: BankSession,
        account_id: str,
        date_range: DateRange,
    ) -> list[BankTransaction]:
        """
        Retrieve booked transactions of one account within a date range.

        Memos are normalized before they are returned.

        Raises
        ------
        SessionExpiredError
            If the activated session is no longer valid
        """

    @abstractmethod
    async def list_accounts(self, session: BankSession) -> list[BankAccount]:
        """List accounts visible in the activated session."""

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
