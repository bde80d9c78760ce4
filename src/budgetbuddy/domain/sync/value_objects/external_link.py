"""External link hint value object."""

from pydantic import BaseModel, ConfigDict


class ExternalLink(BaseModel):
    """Label plus deep link for looking a transaction up at a third party."""

    label: str
    url: str

    model_config = ConfigDict(frozen=True)
