# semantic_disambiguation/stable_ids.py
from __future__ import annotations

import hashlib
import json
from typing import Any, Sequence

from semantic_disambiguation.unification import Value, format_value


def _sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _canon(obj: Any) -> str:
    """
    Canonical JSON string (stable across runs) for hashing.
    """
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def derive_rule_id(
    *,
    predicate: str,
    arity: int,
    body_kind: str,
    goals: Sequence[tuple[str, Sequence[Value]]],
    source: str,
) -> str:
    """
    Rule ID from the rule's content: same head, body and source -> same id.
    """
    key_obj = {
        "predicate": predicate,
        "arity": arity,
        "body": body_kind,
        "goals": [
            {"predicate": goal_predicate, "args": [format_value(arg) for arg in args]}
            for goal_predicate, args in goals
        ],
        "source": source,
    }
    return "rule_" + _sha256_hex(_canon(key_obj))[:16]
