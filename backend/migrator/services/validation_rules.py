"""
Validation Rules — field-at-a-time checks over parsed records

Each active rule tests one field of every record. A failing rule records an
error against the record; nothing here aborts the run. A malformed regex or
unusable parameter (wrong shape, non-numeric or nested bounds) makes the rule
fail for the record it was applied to.

Supported rules:
  required        value is not None / ""
  length          string length within {min, max}
  range           numeric value within {min, max}
  regex           str(value) matches the pattern
  date_format     "YYYY-MM-DD" exact layout, otherwise any parseable date
  allowed_values  case-insensitive membership
  unique          value does not repeat across the tested records
  data_type       number / string / boolean
Unknown rule kinds pass.
"""

import json
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .type_inference import looks_like_date
from .values import is_boolean_kind, is_missing, is_nan, is_numeric_kind, to_display_string, value_key

logger = logging.getLogger("migrator.validation")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class ValidationRule:
    id: int
    field: str
    rule: str
    params: Any = None
    message: str = ""
    status: str = "active"  # "active", "draft", "disabled"


@dataclass
class FieldError:
    field: str
    message: str
    value: Any


@dataclass
class RecordResult:
    id: Any
    errors: List[FieldError] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "errors": [{"field": e.field, "message": e.message, "value": e.value} for e in self.errors],
            "passed": self.passed,
        }


@dataclass
class ValidationTestResults:
    total: int
    passed: int
    failed: int
    records: List[RecordResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "records": [r.to_dict() for r in self.records],
        }


def evaluate_rules(records: Sequence[Dict[str, Any]], rules: Sequence[ValidationRule]) -> ValidationTestResults:
    """
    Test every active rule against every record.

    Args:
        records: Parsed rows
        rules: Rules to apply; non-active rules are ignored

    Returns:
        ValidationTestResults with per-record errors
    """
    active = [r for r in rules if r.status == "active"]
    counts = _value_counts(records, [r.field for r in active if r.rule == "unique"])

    results: List[RecordResult] = []
    for index, record in enumerate(records):
        result = RecordResult(id=record.get("id", index))
        for rule in active:
            if rule.field not in record:
                continue
            value = record[rule.field]
            if not check_rule(rule, value, counts.get(rule.field)):
                result.errors.append(FieldError(field=rule.field, message=rule.message, value=value))
        results.append(result)

    passed = sum(1 for r in results if r.passed)
    logger.info(
        "evaluate_rules: %d records, %d active rules -> %d passed, %d failed",
        len(results), len(active), passed, len(results) - passed,
    )
    return ValidationTestResults(
        total=len(results),
        passed=passed,
        failed=len(results) - passed,
        records=results,
    )


def check_rule(rule: ValidationRule, value: Any, counts: Optional[Counter] = None) -> bool:
    """Return True when the value satisfies the rule."""
    kind = rule.rule
    params = rule.params

    if kind == "required":
        return not is_missing(value)

    if kind == "length":
        if not isinstance(value, str):
            return False
        try:
            low, high = _length_bounds(params)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Rule %s has unusable length params: %r", rule.id, params)
            return False
        return len(value) >= (low or 0) and (high is None or len(value) <= high)

    if kind == "range":
        if not is_numeric_kind(value) or is_nan(value):
            return False
        try:
            low, high = _bounds(params)
        except (TypeError, ValueError):
            logger.warning("Rule %s has unusable range params: %r", rule.id, params)
            return False
        return (low is None or value >= low) and (high is None or value <= high)

    if kind == "regex":
        try:
            return re.search(str(params), _as_text(value)) is not None
        except re.error:
            logger.warning("Rule %s has an invalid pattern: %r", rule.id, params)
            return False

    if kind == "date_format":
        if params == "YYYY-MM-DD":
            return bool(_ISO_DATE.match(_as_text(value)))
        return isinstance(value, str) and looks_like_date(value)

    if kind == "allowed_values":
        allowed = {v.lower() for v in _split_list(params)}
        return _as_text(value).lower() in allowed

    if kind == "unique":
        if counts is None or is_missing(value):
            return True
        return counts[value_key(value)] <= 1

    if kind == "data_type":
        expected = str(params).strip().lower() if params is not None else ""
        if expected == "number":
            return is_numeric_kind(value)
        if expected == "string":
            return isinstance(value, str)
        if expected == "boolean":
            return is_boolean_kind(value)
        return True

    return True


# ─── Parameter parsing ───────────────────────────────────────────────────


def _as_text(value: Any) -> str:
    return to_display_string(value)


def _value_counts(records: Sequence[Dict[str, Any]], fields: List[str]) -> Dict[str, Counter]:
    counts: Dict[str, Counter] = {}
    for name in fields:
        counter: Counter = Counter()
        for record in records:
            value = record.get(name)
            if not is_missing(value):
                counter[value_key(value)] += 1
        counts[name] = counter
    return counts


def _split_list(params: Any) -> List[str]:
    if params is None:
        return []
    if isinstance(params, (list, tuple, set)):
        return [str(p).strip() for p in params]
    return [p.strip() for p in str(params).split(",")]


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _bounds(params: Any) -> Tuple[Optional[float], Optional[float]]:
    """Read {min, max}, [min, max], "min,max" or a JSON object."""
    if isinstance(params, dict):
        return _to_number(params.get("min")), _to_number(params.get("max"))
    if isinstance(params, (list, tuple)) and len(params) == 2:
        return _to_number(params[0]), _to_number(params[1])
    if isinstance(params, str):
        text = params.strip()
        if text.startswith("{") or text.startswith("["):
            try:
                return _bounds(json.loads(text))
            except json.JSONDecodeError as e:
                raise ValueError(str(e)) from e
        parts = [p.strip() for p in text.split(",")]
        if len(parts) == 2:
            return _to_number(parts[0]), _to_number(parts[1])
    raise ValueError(f"Unrecognised bounds: {params!r}")


def _length_bounds(params: Any) -> Tuple[Optional[int], Optional[int]]:
    """Length accepts the range forms plus a bare maximum."""
    if isinstance(params, (int, float)) and not isinstance(params, bool):
        return 0, int(params)
    if params is None:
        return None, None
    if isinstance(params, str) and "," not in params and not params.strip().startswith("{"):
        return 0, int(params.strip())
    low, high = _bounds(params)
    return (int(low) if low is not None else None), (int(high) if high is not None else None)
