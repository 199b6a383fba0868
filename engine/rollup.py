"""Customer capacity rollups, portfolio summary, and utilization alerts.

Everything here is recomputed from the current links and rack counts on each
call; derived statuses are never stored.
"""

from typing import Dict, List, Optional
from models.assignment import Assignment
from models.customer import Customer, CustomerRollup
from models.rack import Rack
from engine.explainer import explain_rollup
from config.defaults import (
    OVER_CAPACITY_PCT, NEEDS_ATTENTION_PCT, LOW_UTILIZATION_PCT,
    CAPACITY_BANDS, ASSIGNMENT_KINDS,
)


def classify_utilization(overall_utilization: float, rule_config: Optional[dict] = None) -> str:
    """Map a utilization % to a rollup status. Both thresholds are strict."""
    cfg = rule_config or {}
    if overall_utilization > cfg.get("over_capacity_pct", OVER_CAPACITY_PCT):
        return "over_capacity"
    if overall_utilization > cfg.get("needs_attention_pct", NEEDS_ATTENTION_PCT):
        return "needs_attention"
    return "active"


def compute_customer_rollup(
    customer: Customer,
    assignments: List[Assignment],
    rack_map: Dict[str, Rack],
    rule_config: Optional[dict] = None,
) -> CustomerRollup:
    """Sum capacity and occupancy over the customer's active rack links."""
    links = [a for a in assignments if a.customer_id == customer.customer_id and a.is_active]

    total_capacity = 0
    total_used = 0
    for a in links:
        rack = rack_map.get(a.rack_id)
        if rack is None:
            continue
        total_capacity += rack.capacity or 0
        total_used += rack.current_count or 0

    overall = total_used / total_capacity * 100 if total_capacity > 0 else 0.0

    return CustomerRollup(
        customer_id=customer.customer_id,
        customer_name=customer.name,
        assignment_count=len(links),
        total_capacity=total_capacity,
        total_used=total_used,
        overall_utilization=overall,
        status=classify_utilization(overall, rule_config),
    )


def compute_all_rollups(
    customers: List[Customer],
    assignments: List[Assignment],
    rack_map: Dict[str, Rack],
    rule_config: Optional[dict] = None,
) -> List[CustomerRollup]:
    return [compute_customer_rollup(c, assignments, rack_map, rule_config) for c in customers]


def explain_customer_rollup(rollup: CustomerRollup, rule_config: Optional[dict] = None) -> List[str]:
    cfg = rule_config or {}
    crossed = None
    if rollup.status == "over_capacity":
        crossed = cfg.get("over_capacity_pct", OVER_CAPACITY_PCT)
    elif rollup.status == "needs_attention":
        crossed = cfg.get("needs_attention_pct", NEEDS_ATTENTION_PCT)
    return explain_rollup(
        customer_name=rollup.customer_name,
        assignment_count=rollup.assignment_count,
        total_capacity=rollup.total_capacity,
        total_used=rollup.total_used,
        overall_utilization=rollup.overall_utilization,
        status=rollup.status,
        threshold_crossed=crossed,
    )


def capacity_band(current: int, capacity: int) -> str:
    """Indicator band for a single rack or customer bar."""
    pct = current / capacity * 100 if capacity > 0 else 0
    for min_pct, band in CAPACITY_BANDS:
        if pct >= min_pct:
            return band
    return "normal"


def summarize_portfolio(
    rollups: List[CustomerRollup],
    assignments: List[Assignment],
) -> dict:
    """Headline numbers for the utilization dashboard."""
    total_capacity = sum(r.total_capacity for r in rollups)
    total_used = sum(r.total_used for r in rollups)
    active_links = [a for a in assignments if a.is_active]

    status_counts = {"active": 0, "needs_attention": 0, "over_capacity": 0}
    for r in rollups:
        status_counts[r.status] = status_counts.get(r.status, 0) + 1

    kind_counts = {kind: 0 for kind in ASSIGNMENT_KINDS}
    for a in active_links:
        kind_counts[a.kind] = kind_counts.get(a.kind, 0) + 1

    return {
        "customer_count": len(rollups),
        "total_capacity": total_capacity,
        "total_used": total_used,
        "overall_utilization": total_used / total_capacity * 100 if total_capacity > 0 else 0.0,
        "average_utilization": (
            sum(r.overall_utilization for r in rollups) / len(rollups) if rollups else 0.0
        ),
        "active_assignments": len(active_links),
        "status_counts": status_counts,
        "kind_counts": kind_counts,
    }


def compute_utilization_alerts(
    rollups: List[CustomerRollup],
    rule_config: Optional[dict] = None,
) -> List[dict]:
    """Customers needing operator action, plus surplus customers worth reviewing.

    Returns list of dicts with: customer_id, customer_name, utilization, status, level, message
    """
    cfg = rule_config or {}
    low_pct = cfg.get("low_utilization_pct", LOW_UTILIZATION_PCT)

    alerts = []
    for r in sorted(rollups, key=lambda r: -r.overall_utilization):
        if r.status == "over_capacity":
            level = "error"
            message = f"Over capacity at {r.overall_utilization:.1f}% - Immediate action required"
        elif r.status == "needs_attention":
            level = "warning"
            message = f"{r.overall_utilization:.1f}% utilization - Consider adding more racks"
        elif r.assignment_count > 0 and r.overall_utilization < low_pct:
            level = "info"
            message = f"Only {r.overall_utilization:.1f}% utilized - racks could be released"
        else:
            continue
        alerts.append({
            "customer_id": r.customer_id,
            "customer_name": r.customer_name,
            "utilization": r.overall_utilization,
            "status": r.status,
            "level": level,
            "message": message,
        })
    return alerts


def get_rack_utilization(
    racks: List[Rack],
    assignments: List[Assignment],
    customer_names: Optional[Dict[str, str]] = None,
) -> List[dict]:
    """Compute utilization stats per rack, with the customers linked to it."""
    names = customer_names or {}
    linked: Dict[str, List[str]] = {}
    for a in assignments:
        if a.is_active:
            linked.setdefault(a.rack_id, []).append(names.get(a.customer_id, a.customer_id))

    results = []
    for r in racks:
        results.append({
            "rack_id": r.rack_id,
            "rack_code": r.code,
            "warehouse_name": r.warehouse_name,
            "zone_name": r.zone_name,
            "shelf_name": r.shelf_name,
            "path": r.path,
            "capacity": r.capacity,
            "current_count": r.current_count,
            "free_slots": r.free_slots,
            "utilization_pct": r.utilization_pct,
            "band": capacity_band(r.current_count, r.capacity),
            "status": r.status,
            "customers": sorted(linked.get(r.rack_id, [])),
        })
    return results
