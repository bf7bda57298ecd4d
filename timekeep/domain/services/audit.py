"""Audit trail for workflow transitions.
Entities collect domain events; services flush them here once the change is stored.
"""

import logging

from timekeep.domain.models.base import BaseEntity

audit_logger = logging.getLogger("timekeep.audit")


def record_events(entity: BaseEntity) -> None:
    """Log and clear the entity's pending domain events."""
    for event in entity.pull_events():
        data = event.to_dict()
        audit_logger.info(f"{data['event_name']} {data['data']}")
