"""
Keyword-based category inference for rules that arrive without one.

The table is checked top to bottom and the first category with a keyword
in "<name> <description>" wins. THC Content sits before Placement Rules
so that potency rules mentioning "display" land with the potency rules.
"""

from typing import List, Optional, Tuple
from labelcheck.models import RuleCategory


CATEGORY_KEYWORDS: List[Tuple[RuleCategory, Tuple[str, ...]]] = [
    (RuleCategory.REQUIRED_WARNINGS, ("warning", "keep out", "addictive", "intoxicating")),
    (RuleCategory.SYMBOLS_AND_ICONS, ("symbol", "icon", "universal")),
    (RuleCategory.INGREDIENT_PANELS, ("ingredient", "allergen")),
    (RuleCategory.NET_WEIGHT_FORMAT, ("net weight", "net quantity", "net contents")),
    (RuleCategory.THC_CONTENT, ("thc", "cbd", "cannabinoid", "potency")),
    (RuleCategory.PLACEMENT_RULES, ("placement", "display", "font", "legib")),
    (RuleCategory.MANUFACTURER_INFO, ("manufacturer", "licensee", "producer")),
    (RuleCategory.BATCH_AND_TESTING, ("batch", "test", "certificate", "qr code")),
]


def infer_category(rule_name: str, rule_description: Optional[str] = None) -> RuleCategory:
    """
    Examples:
        infer_category("THC Percentage Display", "Show potency as %") → THC Content
        infer_category("Font Size", "At least 6pt")                   → Placement Rules
        infer_category("Misc", "Nothing special")                     → General
    """
    text = f"{rule_name or ''} {rule_description or ''}".lower()

    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category

    return RuleCategory.GENERAL


def normalize_category(category: Optional[str], rule_name: str, rule_description: Optional[str] = None) -> RuleCategory:
    """Keep a category that is already one of the fixed set, otherwise infer one"""
    if category:
        for member in RuleCategory:
            if member.value.lower() == category.strip().lower():
                return member

    return infer_category(rule_name, rule_description)
