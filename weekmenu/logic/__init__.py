"""Core business logic layer.

Subpackages:
- menu: week calendar, menu store service, planning progress

The sync client and the HTTP layer both build on these helpers.
"""
__all__ = ["menu"]
