"""OAuth token pair value object."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from budgetbuddy.domain.shared.time import utc_now
from budgetbuddy.domain.shared.value_objects import SecureString


class TokenPair(BaseModel):
    """Access and refresh token returned by the bank's token endpoint."""

    access_token: SecureString
    refresh_token: SecureString
    expires_in: int | None = Field(default=None, description="Lifetime in seconds")
    obtained_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(frozen=True)
