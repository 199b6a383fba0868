"""Commit a document into the rack an evaluation chose.

Evaluation is read-only, so two evaluations can pick the same rack. Placement
closes that gap: it re-reads the link, re-checks its threshold and the rack's
physical capacity, and increments the count in one step under a per-rack lock.
"""

import logging
import threading
import weakref
from typing import Dict, List, Optional

from models.assignment import Assignment, AssignmentDecision
from models.rack import Rack
from engine.assignment_engine import compute_utilization_pct
from engine.errors import RackSaturatedError, StaleAssignmentError, UnknownRackError

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
# Entries drop once no caller holds the lock, so retired rack ids do not accumulate
_rack_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(rack_id: str) -> threading.Lock:
    with _registry_lock:
        lock = _rack_locks.get(rack_id)
        if lock is None:
            lock = threading.Lock()
            _rack_locks[rack_id] = lock
        return lock


def _current_link(assignments: List[Assignment], decision: AssignmentDecision) -> Assignment:
    """The decided link as it stands now; it must still be active and point at the same rack."""
    decided = decision.assignment
    link = next((a for a in assignments if a.assignment_id == decided.assignment_id), None)
    if link is None or not link.is_active or link.rack_id != decision.assigned_rack.rack_id:
        raise StaleAssignmentError(
            f"Assignment {decided.assignment_id} is no longer an active link to {decision.assigned_rack.rack_code}",
            details={"assignment_id": decided.assignment_id, "rack_id": decision.assigned_rack.rack_id},
        )
    return link


def place_document(
    rack_map: Dict[str, Rack],
    assignments: List[Assignment],
    decision: AssignmentDecision,
    rule_config: Optional[dict] = None,
) -> Rack:
    """Reserve one slot in the decided rack and return it with the new count.

    Raises StaleAssignmentError when the link was retired or re-pointed since
    the decision, and RackSaturatedError when the rack reached the link's
    threshold or its physical capacity; the caller should re-evaluate.
    """
    if not decision.success or decision.assigned_rack is None or decision.assignment is None:
        raise ValueError(f"Cannot place a document from a failed decision: {decision.message}")

    rack_id = decision.assigned_rack.rack_id

    with _lock_for(rack_id):
        link = _current_link(assignments, decision)
        threshold = link.capacity_threshold_pct

        rack = rack_map.get(rack_id)
        if rack is None:
            raise UnknownRackError(f"Rack {rack_id} is no longer in the catalog", details={"rack_id": rack_id})

        # Physical capacity is a hard limit whatever the threshold config says
        if rack.capacity <= 0 or rack.current_count >= rack.capacity:
            logger.warning("Rack %s is physically full (%d/%d)", rack.code, rack.current_count, rack.capacity)
            raise RackSaturatedError(
                f"Rack {rack.code} is full ({rack.current_count}/{rack.capacity})",
                details={"rack_id": rack_id, "current_count": rack.current_count, "capacity": rack.capacity},
            )

        utilization_pct, _ = compute_utilization_pct(rack, rule_config)
        if utilization_pct >= threshold:
            logger.warning(
                "Rack %s reached %.1f%% (threshold %.0f%%) before placement",
                rack.code, utilization_pct, threshold,
            )
            raise RackSaturatedError(
                f"Rack {rack.code} is at {utilization_pct:.1f}%, not below its {threshold:.0f}% threshold",
                details={"rack_id": rack_id, "utilization_pct": utilization_pct, "threshold_pct": threshold},
            )

        rack.current_count += 1
        if rack.current_count >= rack.capacity:
            rack.status = "full"
        logger.info("Placed document in %s (%d/%d)", rack.code, rack.current_count, rack.capacity)
        return rack
