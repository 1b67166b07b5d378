"""Service layer for roster workflows."""

from .roster import RosterService, parse_bulk_names

__all__ = ["RosterService", "parse_bulk_names"]
