from __future__ import annotations

from dataclasses import dataclass

"""Acting user model.

The HTTP layer authenticates the caller and hands the pipeline an Actor; the
pipeline never reads request state on its own.
"""

__all__ = [
    "Actor",
    "Owner",
]


@dataclass(frozen=True)
class Actor:
    id: str
    role: str  # faculty / institute / superadmin ...


@dataclass(frozen=True)
class Owner:
    """Resolved owning faculty for a student batch."""
    coordinator_id: str
    department_id: str
    name: str = ""
