"""Detection of payments routed through marketplaces and payment services.

Such transactions carry little information of their own; the attached link
lets the reviewer look up what was actually bought before categorizing.
"""

import re

from budgetbuddy.domain.banking.value_objects import BankTransaction
from budgetbuddy.domain.sync.value_objects import ExternalLink

AMAZON_PATTERNS = [
    re.compile(r"AMAZON\s*(PAYMENTS|EU|DE)?", re.IGNORECASE),
    re.compile(r"AMZN\s*MKTP", re.IGNORECASE),
    re.compile(r"Amazon\.de", re.IGNORECASE),
    re.compile(r"AMAZON\s*\.DE", re.IGNORECASE),
]

PAYPAL_PATTERNS = [
    re.compile(r"PAYPAL\s*\*", re.IGNORECASE),
    re.compile(r"PP\.\d+", re.IGNORECASE),
    re.compile(r"PAYPAL", re.IGNORECASE),
]

# Order IDs look like 302-1234567-1234567; the bank may glue its two-digit
# line number in front of them.
AMAZON_ORDER_ID_PATTERN = re.compile(r"(?:(?:^|\s)\d{2})?([A-Z0-9]{3}-\d{7}-\d{7})")

AMAZON_ORDER_URL = (
    "https://www.amazon.de/gp/your-account/order-details?ie=UTF8&orderID={order_id}"
)
AMAZON_ORDER_HISTORY_URL = "https://www.amazon.de/gp/your-account/order-history"
PAYPAL_ACTIVITY_URL = "https://www.paypal.com/activities"


def _searchable_text(transaction: BankTransaction) -> str:
    if transaction.payee:
        return f"{transaction.payee} {transaction.memo}"
    return transaction.memo


def _amazon_link(text: str) -> ExternalLink:
    match = AMAZON_ORDER_ID_PATTERN.search(text)
    if match:
        order_id = match.group(1)
        return ExternalLink(
            label=f"Bestellung {order_id}",
            url=AMAZON_ORDER_URL.format(order_id=order_id),
        )
    return ExternalLink(label="Amazon Orders", url=AMAZON_ORDER_HISTORY_URL)


def detect_special_transaction(transaction: BankTransaction) -> list[ExternalLink]:
    """Return lookup links for known aggregator markers in payee or memo."""
    text = _searchable_text(transaction)
    links: list[ExternalLink] = []

    if any(pattern.search(text) for pattern in AMAZON_PATTERNS):
        links.append(_amazon_link(text))

    if any(pattern.search(text) for pattern in PAYPAL_PATTERNS):
        links.append(ExternalLink(label="PayPal Activity", url=PAYPAL_ACTIVITY_URL))

    return links
