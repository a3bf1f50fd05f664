"""Errors raised for malformed seating input.

A group that cannot be fitted is not an error: the search returns ``None``
and the planner lists the group as unplaced.
"""
from __future__ import annotations


class SeatingError(Exception):
    """Base class for theatre seating errors."""


class InvalidGroupError(SeatingError, ValueError):
    """A guest record, party link or guest group is structurally invalid."""


class InvalidTableError(SeatingError, ValueError):
    """A table record is structurally invalid."""


class LayoutError(SeatingError, ValueError):
    """A venue layout configuration is inconsistent."""
