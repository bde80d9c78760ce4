"""State carried between the steps of the bank authentication handshake."""

from pydantic import BaseModel, ConfigDict

from budgetbuddy.domain.banking.value_objects.request_info import RequestInfo
from budgetbuddy.domain.banking.value_objects.tan_challenge import TanChallenge
from budgetbuddy.domain.banking.value_objects.token_pair import TokenPair
from budgetbuddy.domain.shared.value_objects import SecureString


class AuthHandshake(BaseModel):
    """A begun handshake awaiting TAN confirmation.

    Holds the first-factor tokens, the bank-side session identifier and the
    pending challenge. Retrying a rejected TAN reuses this object, so the
    user does not re-enter credentials while the tokens are valid. The
    client registration is kept for the secondary token grant.
    """

    request_info: RequestInfo
    tokens: TokenPair
    session_identifier: str
    challenge: TanChallenge
    client_id: str
    client_secret: SecureString

    model_config = ConfigDict(frozen=True)


class BankSession(BaseModel):
    """An activated bank session holding the extended (2FA) token pair."""

    request_info: RequestInfo
    tokens: TokenPair
    session_identifier: str

    model_config = ConfigDict(frozen=True)
