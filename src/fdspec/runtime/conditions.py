"""
Condition expression evaluator for attribute policies.

Expressions are short strings over three namespaces, ``user``,
``resource`` and ``request``:

    user.tenant_id = resource.tenant_id
    resource.status IN ('draft', 'pending')
    'admin' IN user.roles
    resource.amount < 10000 AND NOT resource.locked
    resource.approved_by IS NOT NULL

Parsing is a textual split, not a grammar. Checks run in a fixed order
(AND, OR, NOT, IS NOT NULL, IS NULL, IN, comparisons, bare value), so
AND binds looser than OR and there are no parentheses for grouping.

Evaluation never raises: anything that goes wrong yields False.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

NUMBER_LITERAL = re.compile(r"^-?\d+(\.\d+)?$")

# Checked in this order; the two-character operators must come first
COMPARISON_OPERATORS = ("!=", "<=", ">=", "=", "<", ">")


class _Undefined:
    """Value of a path that does not resolve. Distinct from None (``null``)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Any = _Undefined()


@dataclass
class ConditionContext:
    """
    Values a condition can refer to.

    Attributes:
        user: Current user (id, tenant_id, roles, ...)
        resource: Record being accessed
        request: Request payload
    """

    user: Mapping[str, Any] = field(default_factory=dict)
    resource: Mapping[str, Any] = field(default_factory=dict)
    request: Mapping[str, Any] = field(default_factory=dict)

    def as_mapping(self) -> dict[str, Any]:
        return {"user": self.user, "resource": self.resource, "request": self.request}


# =============================================================================
# Value coercion
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    """Numeric form of a value; NaN when there is none."""
    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        return _parse_number(value)
    if isinstance(value, list | tuple):
        return _parse_number(_to_str(value))
    return math.nan


def _parse_number(text: str) -> float:
    text = text.strip()
    if not text:
        return 0.0
    if text in ("Infinity", "+Infinity"):
        return math.inf
    if text == "-Infinity":
        return -math.inf
    prefix = text[:2].lower()
    if prefix in ("0x", "0o", "0b"):
        try:
            return float(int(text, 0))
        except ValueError:
            return math.nan
    # float() also accepts spellings like "inf", "nan" and "1_000"
    if "_" in text or any(c.isalpha() and c not in "eE" for c in text):
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def _to_str(value: Any) -> str:
    """String form of a value, as used by literal IN-lists."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list | tuple):
        return ",".join("" if item is None or item is UNDEFINED else _to_str(item) for item in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def _truthy(value: Any) -> bool:
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return not (value == 0 or math.isnan(value))
    if isinstance(value, str):
        return value != ""
    # Containers are truthy even when empty
    return True


def _strict_equals(left: Any, right: Any) -> bool:
    """Type-sensitive equality: ``1`` is not ``True`` and ``"1"`` is not ``1``."""
    if left is UNDEFINED or right is UNDEFINED:
        return left is right
    if left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    # Containers compare by identity
    return left is right


def _contains(items: list[Any] | tuple[Any, ...], value: Any) -> bool:
    """Membership where NaN matches NaN, otherwise strict equality."""
    if _is_number(value) and math.isnan(value):
        return any(_is_number(item) and math.isnan(item) for item in items)
    return any(_strict_equals(item, value) for item in items)


# =============================================================================
# Resolution
# =============================================================================


def resolve_value(expression: str, root: Mapping[str, Any]) -> Any:
    """
    Resolve one operand.

    Quoted strings, numbers and ``true``/``false``/``null`` are literals;
    a parenthesized token is returned as raw text for the IN-list parser;
    anything else is a dotted path looked up in ``root``.
    """
    token = expression.strip()

    if len(token) >= 2 and (
        (token[0] == "'" and token[-1] == "'") or (token[0] == '"' and token[-1] == '"')
    ):
        return token[1:-1]

    if NUMBER_LITERAL.match(token):
        return float(token) if "." in token else int(token)

    if token == "true":
        return True
    if token == "false":
        return False
    if token == "null":
        return None

    if token.startswith("(") and token.endswith(")"):
        return token

    value: Any = root
    for part in token.split("."):
        if value is None or value is UNDEFINED:
            return UNDEFINED
        if not isinstance(value, Mapping):
            return UNDEFINED
        value = value.get(part, UNDEFINED)
    return value


def _compare(left: Any, right: Any, op: str) -> bool:
    if op == "=":
        return _strict_equals(left, right)
    if op == "!=":
        return not _strict_equals(left, right)

    a, b = _to_number(left), _to_number(right)
    if op == "<":
        return a < b
    if op == ">":
        return a > b
    if op == "<=":
        return a <= b
    if op == ">=":
        return a >= b
    return False


def _split_pair(expression: str, separator: str) -> tuple[str, str]:
    """Split on every occurrence and keep the first two pieces."""
    parts = expression.split(separator)
    return parts[0].strip(), parts[1].strip()


# =============================================================================
# Evaluation
# =============================================================================


def _evaluate(expression: str, root: Mapping[str, Any]) -> bool:
    expr = expression.strip()

    if " AND " in expr:
        return all(_evaluate(part.strip(), root) for part in expr.split(" AND "))

    if " OR " in expr:
        return any(_evaluate(part.strip(), root) for part in expr.split(" OR "))

    if expr.startswith("NOT "):
        return not _evaluate(expr[4:].strip(), root)

    if " IS NOT NULL" in expr:
        value = resolve_value(expr.replace(" IS NOT NULL", "", 1), root)
        return value is not None and value is not UNDEFINED

    if " IS NULL" in expr:
        value = resolve_value(expr.replace(" IS NULL", "", 1), root)
        return value is None or value is UNDEFINED

    if " IN " in expr:
        left, right = _split_pair(expr, " IN ")
        left_value = resolve_value(left, root)
        right_value = resolve_value(right, root)

        if isinstance(right_value, list | tuple):
            return _contains(right_value, left_value)

        if isinstance(right_value, str) and right_value.startswith("("):
            items = [re.sub(r"^['\"]|['\"]$", "", item.strip()) for item in right_value[1:-1].split(",")]
            return _to_str(left_value) in items

        return False

    for op in COMPARISON_OPERATORS:
        separator = f" {op} "
        if separator in expr:
            left, right = _split_pair(expr, separator)
            return _compare(resolve_value(left, root), resolve_value(right, root), op)

    return _truthy(resolve_value(expr, root))


def evaluate_condition(
    expression: str,
    context: ConditionContext | Mapping[str, Any],
) -> bool:
    """
    Evaluate a condition expression.

    Args:
        expression: Condition string
        context: ConditionContext, or a mapping with user/resource/request keys

    Returns:
        Truth value of the expression; False if it cannot be evaluated
    """
    try:
        root = context.as_mapping() if isinstance(context, ConditionContext) else context
        return _evaluate(expression, root)
    except Exception:
        logger.debug("Condition %r failed to evaluate; treating as false", expression, exc_info=True)
        return False
