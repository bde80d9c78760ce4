"""Tests for Comdirect memo line-number stripping."""

import pytest

from budgetbuddy.infrastructure.banking.comdirect import remove_line_number_prefixes


class TestRemoveLineNumberPrefixes:
    @pytest.mark.parametrize(
        ("memo", "expected"),
        [
            ("01REWE SAGT DANKE", "REWE SAGT DANKE"),
            ("01Miete Januar\n02Wohnung 3", "Miete Januar\nWohnung 3"),
            ("01Überweisung", "Überweisung"),
            ("25.50 EUR erstattet", "25.50 EUR erstattet"),
            ("01 Zeile mit Leerzeichen", "01 Zeile mit Leerzeichen"),
            ("Rechnung 12AB", "Rechnung 12AB"),
            ("123ABC", "123ABC"),
            ("", ""),
        ],
    )
    def test_cases(self, memo, expected):
        assert remove_line_number_prefixes(memo) == expected

    def test_idempotent_on_clean_text(self):
        clean = remove_line_number_prefixes("01Miete Januar\n02Wohnung 3")

        assert remove_line_number_prefixes(clean) == clean

    def test_result_is_stripped(self):
        assert remove_line_number_prefixes("  01Text  \n") == "01Text"
