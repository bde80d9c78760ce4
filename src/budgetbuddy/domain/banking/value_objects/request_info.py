"""Request correlation identifiers for one bank handshake."""

from __future__ import annotations

import time
import uuid

from pydantic import BaseModel, ConfigDict, Field

REQUEST_ID_LENGTH = 9


def _time_based_request_id() -> str:
    return str(int(time.time()))[:REQUEST_ID_LENGTH]


class RequestInfo(BaseModel):
    """Session and request identifiers echoed on every call of a handshake.

    The session ID is a random UUID generated once; the request ID is a
    9-digit numeric string derived from the current Unix time. Both stay
    fixed for the lifetime of the handshake.
    """

    session_id: str = Field(..., min_length=1)
    request_id: str = Field(..., pattern=r"^\d{9}$")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def generate(cls) -> RequestInfo:
        return cls(session_id=str(uuid.uuid4()), request_id=_time_based_request_id())
