"""
Exception types.

Nothing raised here escapes the extraction pipeline: the catalog store and
the remote fallback catch their own errors and degrade to empty results.
"""

from __future__ import annotations


class CourseGuideError(Exception):
    pass


class CatalogError(CourseGuideError):
    """
    The module catalog could not be read or decoded.
    """


class ModuleValidationError(CourseGuideError, ValueError):
    """
    A catalog edit was rejected (empty name, page < 1, ...).
    """
