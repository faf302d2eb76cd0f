"""
Application Services

Services contain the business logic that sits between API routes and data access.
"""

from . import analysis, rule_generation, storage

__all__ = ["analysis", "rule_generation", "storage"]
