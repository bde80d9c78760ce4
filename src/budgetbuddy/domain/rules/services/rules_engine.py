"""Rule-based transaction classification.

Classification Strategy:
1. Compile every rule up front, collecting all compilation errors
2. Evaluate enabled rules in ascending priority; the first match wins
3. Flag aggregator payments (marketplaces, payment services) for attention,
   overriding an automatic categorization
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from budgetbuddy.domain.banking.value_objects import BankTransaction
from budgetbuddy.domain.rules.services.special_transaction_detector import (
    detect_special_transaction,
)
from budgetbuddy.domain.rules.value_objects import PatternKind, Rule, TargetField
from budgetbuddy.domain.sync.entities import SyncTransaction
from budgetbuddy.domain.sync.value_objects import ExternalLink, TransactionStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledRule:
    rule: Rule
    matcher: re.Pattern[str]

    def matches(self, transaction: BankTransaction) -> bool:
        return self.matcher.search(match_text(transaction, self.rule.target_field)) is not None


@dataclass(frozen=True)
class Classification:
    rule: Rule
    category_id: str


def compile_pattern(rule: Rule) -> re.Pattern[str]:
    if rule.pattern_kind == PatternKind.EXACT:
        source = f"^{re.escape(rule.pattern)}$"
    elif rule.pattern_kind == PatternKind.CONTAINS:
        source = re.escape(rule.pattern)
    else:
        source = rule.pattern
    return re.compile(source, re.IGNORECASE)


def match_text(transaction: BankTransaction, target_field: TargetField) -> str:
    payee = transaction.payee or ""
    if target_field == TargetField.PAYEE:
        return payee
    if target_field == TargetField.MEMO:
        return transaction.memo
    return f"{payee} {transaction.memo}"


class RulesEngine:
    """Classifies bank transactions with user-defined rules."""

    def compile_rules(
        self,
        rules: Sequence[Rule],
    ) -> tuple[list[CompiledRule], list[str]]:
        """Compile all rules, sorted by ascending priority.

        Returns
        -------
        The compiled rules and one message per rule that failed to compile.
        Compilation never stops at the first broken rule.
        """
        compiled: list[CompiledRule] = []
        errors: list[str] = []
        for rule in sorted(rules, key=lambda r: r.priority):
            try:
                compiled.append(CompiledRule(rule=rule, matcher=compile_pattern(rule)))
            except re.error as e:
                errors.append(f"Failed to compile pattern '{rule.pattern}': {e}")
        return compiled, errors

    def classify(
        self,
        compiled_rules: Sequence[CompiledRule],
        transaction: BankTransaction,
    ) -> Classification | None:
        for compiled in compiled_rules:
            if not compiled.rule.enabled:
                continue
            if compiled.matches(transaction):
                return Classification(
                    rule=compiled.rule,
                    category_id=compiled.rule.category_id,
                )
        return None

    def detect_special_transaction(self, transaction: BankTransaction) -> list[ExternalLink]:
        return detect_special_transaction(transaction)

    def classify_transactions(
        self,
        rules: Sequence[Rule],
        transactions: Sequence[BankTransaction],
    ) -> tuple[list[SyncTransaction], list[str]]:
        """Turn raw bank transactions into reviewable sync transactions.

        If any rule fails to compile no transaction is processed and the
        compilation errors are returned instead.
        """
        compiled_rules, errors = self.compile_rules(rules)
        if errors:
            logger.warning("%d rule(s) failed to compile", len(errors))
            return [], errors

        results = [self._classify_one(compiled_rules, tx) for tx in transactions]

        logger.info(
            "Classified %d transactions: %d auto-categorized, %d need attention",
            len(results),
            sum(1 for r in results if r.status == TransactionStatus.AUTO_CATEGORIZED),
            sum(1 for r in results if r.status == TransactionStatus.NEEDS_ATTENTION),
        )
        return results, []

    def _classify_one(
        self,
        compiled_rules: Sequence[CompiledRule],
        transaction: BankTransaction,
    ) -> SyncTransaction:
        links = self.detect_special_transaction(transaction)
        classification = self.classify(compiled_rules, transaction)

        if classification is None:
            return SyncTransaction(
                transaction=transaction,
                status=(
                    TransactionStatus.NEEDS_ATTENTION
                    if links
                    else TransactionStatus.PENDING
                ),
                external_links=tuple(links),
            )

        # A flagged aggregator payment still needs a look even when a rule matched
        rule = classification.rule
        return SyncTransaction(
            transaction=transaction,
            status=(
                TransactionStatus.NEEDS_ATTENTION
                if links
                else TransactionStatus.AUTO_CATEGORIZED
            ),
            category_id=classification.category_id,
            category_name=rule.category_name,
            matched_rule_id=rule.id,
            payee_override=rule.payee_override,
            external_links=tuple(links),
        )
