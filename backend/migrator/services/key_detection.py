"""
Key Candidate Detection — primary/foreign key hints from column names

A column is a primary-key candidate when its name looks like an identifier
and every row holds a distinct value. A key-like column that is not a
primary-key candidate is a foreign-key candidate. The primary check always
runs first, so a column never lands in both lists.

Two name policies exist:
  SUBSTRING  name contains "id" or "key" anywhere ("width" and "valid" match)
  SUFFIX     name is "id"/"key" or ends with "_id"/"_key"
"""

from enum import Enum


class KeyNamePolicy(str, Enum):
    SUBSTRING = "substring"
    SUFFIX = "suffix"


class KeyRole(str, Enum):
    PRIMARY = "primary"
    FOREIGN = "foreign"
    NONE = "none"


_KEY_TOKENS = ("id", "key")


def resolve_policy(value) -> KeyNamePolicy:
    """Accept a policy member or its configured string name."""
    if isinstance(value, KeyNamePolicy):
        return value
    try:
        return KeyNamePolicy(str(value).strip().lower())
    except ValueError:
        raise ValueError(
            f"Unknown key name policy {value!r}; expected one of "
            f"{[p.value for p in KeyNamePolicy]}"
        ) from None


def is_key_like_name(column: str, policy: KeyNamePolicy = KeyNamePolicy.SUBSTRING) -> bool:
    low = column.lower()
    if policy == KeyNamePolicy.SUFFIX:
        return any(low == t or low.endswith(f"_{t}") for t in _KEY_TOKENS)
    return any(t in low for t in _KEY_TOKENS)


def classify_key_candidate(
    column: str,
    unique_count: int,
    row_count: int,
    policy: KeyNamePolicy = KeyNamePolicy.SUBSTRING,
) -> KeyRole:
    """Decide whether a column is a primary-key, foreign-key or neither."""
    if not is_key_like_name(column, policy):
        return KeyRole.NONE
    if unique_count == row_count:
        return KeyRole.PRIMARY
    return KeyRole.FOREIGN
