"""Rule repository backed by a JSON file.

The file holds a list of rule objects, e.g.::

    [
      {"id": "r1", "name": "Groceries", "pattern": "REWE",
       "pattern_kind": "contains", "target_field": "payee",
       "category_id": "cat-food", "category_name": "Groceries",
       "priority": 10}
    ]
"""

import asyncio
import logging
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from budgetbuddy.domain.rules.repositories import RuleRepository
from budgetbuddy.domain.rules.value_objects import Rule
from budgetbuddy.domain.shared.exceptions import ValidationError

logger = logging.getLogger(__name__)

_RULE_LIST = TypeAdapter(list[Rule])


class JsonFileRuleRepository(RuleRepository):
    def __init__(self, path: Path):
        self._path = path

    async def load_rules(self) -> list[Rule]:
        if not self._path.exists():
            logger.info("Rules file %s does not exist, using no rules", self._path)
            return []

        content = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        try:
            rules = _RULE_LIST.validate_json(content)
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            msg = f"Rules file {self._path} is invalid"
            raise ValidationError(
                msg,
                details={"path": str(self._path), "errors": problems},
            ) from e

        logger.info("Loaded %d rules from %s", len(rules), self._path)
        return rules
