"""Normalization of Comdirect remittance information.

Comdirect prefixes every memo line with a two-digit line number glued to
the text ("01REWE Markt//BERLIN"). Only a two-digit prefix directly
followed by a letter is removed; amounts like "25.50" or "01 " stay as
they are.
"""

import re

# [^\W\d_] is a Unicode letter, so "01Überweisung" is handled as well
_LINE_NUMBER_PREFIX = re.compile(r"^\d{2}(?=[^\W\d_])", re.MULTILINE)


def remove_line_number_prefixes(memo: str) -> str:
    return _LINE_NUMBER_PREFIX.sub("", memo).strip()
