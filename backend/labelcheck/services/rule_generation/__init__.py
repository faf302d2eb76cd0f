"""
Rule Generation Services

Imports rules from the external rule-extraction service into a rule set.
"""

from .categories import infer_category, normalize_category
from .extraction_client import RuleExtractionClient, is_transient_error
from .importer import RuleImporter, normalize_state

__all__ = [
    "infer_category",
    "normalize_category",
    "RuleExtractionClient",
    "is_transient_error",
    "RuleImporter",
    "normalize_state",
]
