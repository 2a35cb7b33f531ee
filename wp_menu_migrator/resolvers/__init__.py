"""
Resolvers turning exported menu items into target-site creation fields.
"""

from .item_resolver import ITEM_RESOLVERS, build_item_defaults, resolve_item_fields

__all__ = ["ITEM_RESOLVERS", "build_item_defaults", "resolve_item_fields"]
