"""PuLP integer program that recommends extra racks for saturated customers."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pulp

from models.assignment import Assignment
from models.customer import CustomerRollup
from models.rack import Rack
from engine.catalog import available_racks
from config.defaults import TARGET_UTILIZATION_PCT

logger = logging.getLogger(__name__)


@dataclass
class RackRecommendation:
    customer_id: str
    customer_name: str
    rack_id: str
    rack_code: str
    path: str
    capacity: int
    free_slots: int


@dataclass
class RecommendationResult:
    status: str  # "Optimal", "Infeasible", "Not Solved", "Not Needed"
    objective_value: float
    recommendations: List[RackRecommendation]
    projected: List[dict]  # per-customer before/after utilization
    message: str = ""
    unresolved_customers: List[str] = field(default_factory=list)


def recommend_additional_racks(
    rollups: List[CustomerRollup],
    assignments: List[Assignment],
    racks: List[Rack],
    target_pct: Optional[float] = None,
    customer_ids: Optional[List[str]] = None,
    max_racks_per_customer: Optional[int] = None,
    rule_config: Optional[dict] = None,
) -> RecommendationResult:
    """
    Choose unassigned racks that bring customers back under a target utilization.

    By default every customer whose rollup status is not "active" is planned
    for. Each rack goes to at most one customer. The objective is, in order:
    - keep projected usage at or below target (shortfall slack, heavily weighted)
    - add as few racks as possible
    - prefer racks with more free slots (tiebreaker)

    A customer that cannot reach the target with the racks on hand is left
    with its best achievable plan and reported in ``unresolved_customers``.
    """
    cfg = rule_config or {}
    target = target_pct if target_pct is not None else cfg.get("target_utilization_pct", TARGET_UTILIZATION_PCT)
    ratio = target / 100.0

    if customer_ids is None:
        planned = [r for r in rollups if r.status != "active"]
    else:
        wanted = set(customer_ids)
        planned = [r for r in rollups if r.customer_id in wanted]

    if not planned:
        return RecommendationResult(
            status="Not Needed", objective_value=0, recommendations=[], projected=[],
            message="Every customer is within its capacity thresholds.",
        )

    candidates = [r for r in available_racks(racks, assignments) if r.capacity > 0]
    if not candidates:
        return RecommendationResult(
            status="Not Solved", objective_value=0, recommendations=[],
            projected=_project(planned, {}, {}),
            message="No unassigned racks are available to recommend.",
            unresolved_customers=[r.customer_id for r in planned],
        )

    customer_ids_planned = [r.customer_id for r in planned]
    rollup_map = {r.customer_id: r for r in planned}
    rack_map = {r.rack_id: r for r in candidates}
    rack_ids = list(rack_map)
    max_free = max(r.free_slots for r in candidates) or 1

    prob = pulp.LpProblem("RackRecommendation", pulp.LpMinimize)

    # x[customer][rack] = 1 if the rack is linked to the customer
    x = {}
    for ci, c in enumerate(customer_ids_planned):
        for ri, rid in enumerate(rack_ids):
            x[(c, rid)] = pulp.LpVariable(f"x_{ci}_{ri}", cat="Binary")

    # Documents above target after adding racks
    s = {}
    for ci, c in enumerate(customer_ids_planned):
        s[c] = pulp.LpVariable(f"s_{ci}", lowBound=0)
        r = rollup_map[c]
        prob += (
            r.total_used
            + pulp.lpSum(x[(c, rid)] * rack_map[rid].current_count for rid in rack_ids)
            - ratio * (r.total_capacity + pulp.lpSum(x[(c, rid)] * rack_map[rid].capacity for rid in rack_ids))
            <= s[c]
        ), f"target_{ci}"

    SHORTFALL_WEIGHT = 100.0
    RACK_WEIGHT = 1.0
    FREE_SLOT_WEIGHT = 0.01
    prob += (
        SHORTFALL_WEIGHT * pulp.lpSum(s.values())
        + RACK_WEIGHT * pulp.lpSum(x.values())
        - FREE_SLOT_WEIGHT * pulp.lpSum(
            x[(c, rid)] * (rack_map[rid].free_slots / max_free)
            for c in customer_ids_planned for rid in rack_ids
        )
    ), "combined_objective"

    # C1: each rack to at most one customer
    for ri, rid in enumerate(rack_ids):
        prob += pulp.lpSum(x[(c, rid)] for c in customer_ids_planned) <= 1, f"rack_{ri}"

    # C2: rack budget per customer
    if max_racks_per_customer is not None:
        for ci, c in enumerate(customer_ids_planned):
            prob += pulp.lpSum(x[(c, rid)] for rid in rack_ids) <= max_racks_per_customer, f"budget_{ci}"

    prob.solve(pulp.PULP_CBC_CMD(msg=0, timeLimit=30))
    status = pulp.LpStatus[prob.status]

    if status != "Optimal":
        logger.warning("Rack recommendation did not solve: %s", status)
        return RecommendationResult(
            status=status, objective_value=0, recommendations=[],
            projected=_project(planned, {}, {}),
            message=f"Optimization could not find a solution. Status: {status}",
            unresolved_customers=customer_ids_planned,
        )

    chosen: Dict[str, List[Rack]] = {c: [] for c in customer_ids_planned}
    recommendations = []
    for c in customer_ids_planned:
        for rid in rack_ids:
            if (x[(c, rid)].varValue or 0) > 0.5:
                rack = rack_map[rid]
                chosen[c].append(rack)
                recommendations.append(RackRecommendation(
                    customer_id=c,
                    customer_name=rollup_map[c].customer_name,
                    rack_id=rid,
                    rack_code=rack.code,
                    path=rack.path,
                    capacity=rack.capacity,
                    free_slots=rack.free_slots,
                ))

    projected = _project(planned, chosen, {c: target for c in customer_ids_planned})
    unresolved = [p["customer_id"] for p in projected if not p["meets_target"]]

    msg = f"Recommended {len(recommendations)} rack(s) for {len(planned)} customer(s)."
    if unresolved:
        msg += f" {len(unresolved)} customer(s) stay above {target:.0f}% with the racks available."
    logger.info(msg)

    return RecommendationResult(
        status=status,
        objective_value=pulp.value(prob.objective) or 0,
        recommendations=recommendations,
        projected=projected,
        message=msg,
        unresolved_customers=unresolved,
    )


def _project(
    planned: List[CustomerRollup],
    chosen: Dict[str, List[Rack]],
    targets: Dict[str, float],
) -> List[dict]:
    """Before/after utilization for each planned customer."""
    rows = []
    for r in planned:
        added = chosen.get(r.customer_id, [])
        capacity_after = r.total_capacity + sum(rack.capacity for rack in added)
        used_after = r.total_used + sum(rack.current_count for rack in added)
        after = used_after / capacity_after * 100 if capacity_after > 0 else 0.0
        target = targets.get(r.customer_id)
        rows.append({
            "customer_id": r.customer_id,
            "Customer": r.customer_name,
            "Racks Added": len(added),
            "Capacity Before": r.total_capacity,
            "Capacity After": capacity_after,
            "Utilization Before": r.overall_utilization,
            "Utilization After": after,
            "meets_target": target is not None and after <= target + 1e-9,
        })
    return rows
