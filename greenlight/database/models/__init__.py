"""
Database models
"""

from greenlight.database.models.release import (
    ExcludedTicket,
    Release,
    ReleaseStatus,
    ReleaseType,
)

__all__ = [
    "Release",
    "ExcludedTicket",
    "ReleaseStatus",
    "ReleaseType",
]
