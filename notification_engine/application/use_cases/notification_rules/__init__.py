"""Use cases for managing notification rules."""

from .create_rule import create_rule
from .defaults import default_rule_definitions, seed_default_rules
from .list_rules import get_all_rules
from .update_rule import update_rule

__all__ = [
    "create_rule",
    "default_rule_definitions",
    "get_all_rules",
    "seed_default_rules",
    "update_rule",
]
