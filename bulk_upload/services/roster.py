from __future__ import annotations

import logging

from ..db.gateway import PersistenceGateway
from ..models.actor import Owner
from ..models.config_models import FACULTY_TABLE, ROSTER_FIELD

"""Coordinator roster update.

Student ids created during a batch are appended to the coordinating faculty's
roster with one write after the row loop, never one write per row.
"""

__all__ = [
    "update_roster",
]

logger = logging.getLogger(__name__)


def update_roster(gateway: PersistenceGateway, owner: Owner, new_ids: list[str]) -> bool:
    """Append new_ids to the owner's roster. Returns False when nothing was written."""
    if not new_ids:
        return False
    gateway.append_to_array(FACULTY_TABLE, owner.coordinator_id, ROSTER_FIELD, list(new_ids))
    logger.info("roster coordinator=%s appended=%d", owner.coordinator_id, len(new_ids))
    return True
