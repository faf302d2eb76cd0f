"""
CRUD Package

Exports all CRUD operation modules for the label compliance service.
"""

from labelcheck.crud import crud_user
from labelcheck.crud import crud_rule_set
from labelcheck.crud import crud_rule
from labelcheck.crud import crud_check
from labelcheck.crud import crud_panel
from labelcheck.crud import crud_result


__all__ = [
    "crud_user",
    "crud_rule_set",
    "crud_rule",
    "crud_check",
    "crud_panel",
    "crud_result",
]
