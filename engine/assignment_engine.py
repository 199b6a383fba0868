"""First-fit rack assignment for incoming documents.

The evaluator is advisory: it reads customer links and rack occupancy and
returns a decision, it never reserves capacity. See ``engine.placement`` for
the check-and-increment step that commits a placement.
"""

import logging
from typing import Dict, List, Optional, Tuple

from models.assignment import Assignment, AssignmentDecision, RackPlacement
from models.rack import Rack
from models.rule import AssignmentRule
from engine.errors import UnknownRackError
from engine.explainer import (
    explain_candidate_filter,
    explain_chosen_rack,
    explain_skipped_rack,
    explain_zero_capacity,
)
from engine.rule_engine import file_size_in_bounds
from config.defaults import (
    ZERO_CAPACITY_UTILIZATION_PCT,
    FAILURE_NO_ASSIGNMENTS, FAILURE_ALL_AT_CAPACITY,
    NO_ASSIGNMENTS_MESSAGE, ALL_AT_CAPACITY_MESSAGE, ALL_AT_CAPACITY_ACTION,
)

logger = logging.getLogger(__name__)


def compute_utilization_pct(rack: Rack, rule_config: Optional[dict] = None) -> Tuple[float, bool]:
    """Return (utilization %, zero-capacity flag) for a rack.

    A rack with no capacity cannot be divided into; it reports the configured
    ``zero_capacity_utilization_pct`` instead (100 by default, i.e. saturated).
    """
    cfg = rule_config or {}
    if not rack.capacity or rack.capacity <= 0:
        return cfg.get("zero_capacity_utilization_pct", ZERO_CAPACITY_UTILIZATION_PCT), True
    return rack.current_count / rack.capacity * 100, False


def rank_candidates(
    customer_id: str,
    document_type: str,
    assignments: List[Assignment],
    file_size: Optional[int] = None,
    rule_map: Optional[Dict[str, AssignmentRule]] = None,
) -> List[Assignment]:
    """Active links for the customer that accept the document, in scan order.

    Links materialized from a rule also have to satisfy that rule's file-size
    bounds when a file size is given.
    """
    rules = rule_map or {}

    def size_ok(a: Assignment) -> bool:
        rule = rules.get(a.source_rule_id) if a.source_rule_id else None
        return rule is None or file_size is None or file_size_in_bounds(rule, file_size)

    candidates = [
        a for a in assignments
        if a.customer_id == customer_id and a.is_active and a.accepts(document_type) and size_ok(a)
    ]
    # assignment_id only breaks ties between equal priority orders
    return sorted(candidates, key=lambda a: (a.priority_order, a.assignment_id))


def _lookup_rack(rack_map: Dict[str, Rack], assignment: Assignment) -> Rack:
    rack = rack_map.get(assignment.rack_id)
    if rack is None:
        raise UnknownRackError(
            f"Assignment {assignment.assignment_id} references unknown rack {assignment.rack_id}",
            details={"assignment_id": assignment.assignment_id, "rack_id": assignment.rack_id},
        )
    return rack


def evaluate_assignment(
    customer_id: str,
    document_type: str,
    file_size: int,
    assignments: List[Assignment],
    rack_map: Dict[str, Rack],
    rule_map: Optional[Dict[str, AssignmentRule]] = None,
    rule_config: Optional[dict] = None,
) -> AssignmentDecision:
    """Pick the rack an incoming document should go to.

    Walks the customer's active, type-matching links in priority order and
    returns the first rack whose utilization is strictly below the link's
    capacity threshold (first-fit, never best-fit). File size only matters
    for links materialized from a rule with size bounds.
    """
    customer_links = [a for a in assignments if a.customer_id == customer_id and a.is_active]
    candidates = rank_candidates(customer_id, document_type, assignments, file_size, rule_map)

    steps = [explain_candidate_filter(customer_id, document_type, len(customer_links), len(candidates))]

    if not candidates:
        logger.info("No rack links for customer %s and type %s", customer_id, document_type)
        return AssignmentDecision(
            success=False,
            message=NO_ASSIGNMENTS_MESSAGE,
            failure_kind=FAILURE_NO_ASSIGNMENTS,
            explanation_steps=steps,
        )

    for assignment in candidates:
        rack = _lookup_rack(rack_map, assignment)
        utilization_pct, zero_capacity = compute_utilization_pct(rack, rule_config)
        if zero_capacity:
            steps.append(explain_zero_capacity(rack.code, utilization_pct))

        if utilization_pct < assignment.capacity_threshold_pct:
            if zero_capacity:
                utilization_after = utilization_pct
            else:
                utilization_after = (rack.current_count + 1) / rack.capacity * 100
            steps.append(explain_chosen_rack(
                assignment.priority_order, rack.code, utilization_pct,
                assignment.capacity_threshold_pct, utilization_after,
            ))
            logger.debug("Customer %s -> rack %s (%.1f%%)", customer_id, rack.code, utilization_pct)
            return AssignmentDecision(
                success=True,
                message=f"Document will be assigned to {rack.code}",
                assigned_rack=RackPlacement(
                    rack_id=rack.rack_id,
                    rack_code=rack.code,
                    path=rack.path,
                    capacity=rack.capacity,
                    current_count=rack.current_count,
                    utilization_pct=utilization_pct,
                    utilization_after_pct=utilization_after,
                ),
                assignment=assignment,
                explanation_steps=steps,
            )

        steps.append(explain_skipped_rack(
            assignment.priority_order, rack.code, utilization_pct, assignment.capacity_threshold_pct,
        ))

    logger.warning("All %d rack(s) for customer %s are at capacity", len(candidates), customer_id)
    return AssignmentDecision(
        success=False,
        message=ALL_AT_CAPACITY_MESSAGE,
        failure_kind=FAILURE_ALL_AT_CAPACITY,
        suggested_action=ALL_AT_CAPACITY_ACTION,
        explanation_steps=steps,
    )


def candidate_rows(
    customer_id: str,
    document_type: str,
    assignments: List[Assignment],
    rack_map: Dict[str, Rack],
    file_size: Optional[int] = None,
    rule_map: Optional[Dict[str, AssignmentRule]] = None,
    rule_config: Optional[dict] = None,
) -> List[dict]:
    """Scan-order table of a customer's candidate racks, for display."""
    rows = []
    for a in rank_candidates(customer_id, document_type, assignments, file_size, rule_map):
        rack = _lookup_rack(rack_map, a)
        utilization_pct, _ = compute_utilization_pct(rack, rule_config)
        rows.append({
            "priority_order": a.priority_order,
            "rack_code": rack.code,
            "path": rack.path,
            "kind": a.kind,
            "capacity": rack.capacity,
            "current_count": rack.current_count,
            "utilization_pct": utilization_pct,
            "threshold_pct": a.capacity_threshold_pct,
            "available": utilization_pct < a.capacity_threshold_pct,
        })
    return rows
