"""TAN challenge value objects."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChallengeKind(str, Enum):
    """Challenge kinds a bank may issue for session activation."""

    PUSH_TAN = "P_TAN_PUSH"
    PHOTO_TAN = "P_TAN"
    MOBILE_TAN = "M_TAN"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, value: str) -> "ChallengeKind":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class TanChallenge(BaseModel):
    """Challenge descriptor issued by the bank during the handshake."""

    challenge_id: str = Field(..., min_length=1)
    kind: ChallengeKind
    raw_kind: str = Field(..., description="Challenge type exactly as sent by the bank")

    model_config = ConfigDict(frozen=True)

    @property
    def is_push_tan(self) -> bool:
        return self.kind == ChallengeKind.PUSH_TAN
