"""Tests for banking value objects."""

from datetime import date

import pytest
from pydantic import ValidationError

from budgetbuddy.domain.banking.value_objects import (
    ChallengeKind,
    DateRange,
    RequestInfo,
    TanChallenge,
)


class TestRequestInfo:
    def test_generate(self):
        info = RequestInfo.generate()

        assert len(info.request_id) == 9
        assert info.request_id.isdigit()
        assert len(info.session_id) == 36

    def test_generated_sessions_differ(self):
        assert RequestInfo.generate().session_id != RequestInfo.generate().session_id

    @pytest.mark.parametrize("request_id", ["12345678", "1234567890", "12345678a"])
    def test_request_id_must_be_nine_digits(self, request_id):
        with pytest.raises(ValidationError):
            RequestInfo(session_id="abc", request_id=request_id)


class TestTanChallenge:
    def test_push_tan(self):
        challenge = TanChallenge(
            challenge_id="c-1",
            kind=ChallengeKind.from_wire("P_TAN_PUSH"),
            raw_kind="P_TAN_PUSH",
        )

        assert challenge.is_push_tan

    @pytest.mark.parametrize(
        ("wire", "kind"),
        [
            ("P_TAN", ChallengeKind.PHOTO_TAN),
            ("M_TAN", ChallengeKind.MOBILE_TAN),
            ("SOMETHING_NEW", ChallengeKind.UNKNOWN),
        ],
    )
    def test_other_kinds(self, wire, kind):
        assert ChallengeKind.from_wire(wire) == kind


class TestDateRange:
    def test_last_days(self):
        date_range = DateRange.last_days(30, date(2025, 3, 31))

        assert date_range.start == date(2025, 3, 1)
        assert date_range.end == date(2025, 3, 31)

    def test_contains_is_inclusive(self):
        date_range = DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31))

        assert date_range.contains(date(2025, 1, 1))
        assert date_range.contains(date(2025, 1, 31))
        assert not date_range.contains(date(2025, 2, 1))

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            DateRange(start=date(2025, 2, 1), end=date(2025, 1, 1))
