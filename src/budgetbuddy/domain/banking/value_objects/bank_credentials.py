"""Bank credentials value object."""

from pydantic import BaseModel, ConfigDict, Field

from budgetbuddy.domain.shared.value_objects import SecureString


class BankCredentials(BaseModel):
    """OAuth client registration plus the user's online-banking login."""

    client_id: str = Field(..., min_length=1)
    client_secret: SecureString
    username: str = Field(..., min_length=1)
    password: SecureString

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
