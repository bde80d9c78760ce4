"""Date range value object for transaction queries."""

from __future__ import annotations

from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, model_validator


class DateRange(BaseModel):
    """Inclusive booking-date range."""

    start: date
    end: date

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> DateRange:
        if self.start > self.end:
            msg = f"start ({self.start}) must not be after end ({self.end})"
            raise ValueError(msg)
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def last_days(cls, days: int, today: date) -> DateRange:
        return cls(start=today - timedelta(days=days), end=today)
