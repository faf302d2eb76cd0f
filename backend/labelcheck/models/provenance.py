"""
Result provenance

A check result is scored against either a stored rule (referenced by id)
or a rule the model synthesized for this check only (its display data is
copied onto the result). The two shapes are separate types so a result
can never carry both or neither.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class PersistedRuleRef:
    rule_id: str


@dataclass(frozen=True)
class GeneratedRuleRef:
    name: str
    description: Optional[str]
    category: str


ResultProvenance = Union[PersistedRuleRef, GeneratedRuleRef]
