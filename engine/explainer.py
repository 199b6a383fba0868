"""Generates human-readable explanations for assignment decisions and rollups."""

from typing import List, Optional


def explain_candidate_filter(
    customer_id: str,
    document_type: str,
    total_links: int,
    candidate_count: int,
) -> str:
    return (
        f"Step 1 - Candidates: {candidate_count} of {total_links} active rack link(s) "
        f"for customer {customer_id} accept '{document_type}' documents"
    )


def explain_skipped_rack(
    order: int,
    rack_code: str,
    utilization_pct: float,
    threshold_pct: float,
) -> str:
    return (
        f"Priority {order} - {rack_code}: {utilization_pct:.1f}% used, "
        f"not below {threshold_pct:.0f}% threshold => skipped"
    )


def explain_chosen_rack(
    order: int,
    rack_code: str,
    utilization_pct: float,
    threshold_pct: float,
    utilization_after_pct: float,
) -> str:
    return (
        f"Priority {order} - {rack_code}: {utilization_pct:.1f}% used, below "
        f"{threshold_pct:.0f}% threshold => selected "
        f"(after placement {utilization_after_pct:.1f}%)"
    )


def explain_zero_capacity(rack_code: str, assumed_pct: float) -> str:
    return f"Note: {rack_code} has zero capacity, treated as {assumed_pct:.0f}% utilized"


def explain_rollup(
    customer_name: str,
    assignment_count: int,
    total_capacity: int,
    total_used: int,
    overall_utilization: float,
    status: str,
    threshold_crossed: Optional[float] = None,
) -> List[str]:
    """Produce step-by-step explanation for a customer capacity rollup."""
    steps = [
        f"Step 1 - Links: {customer_name} holds {assignment_count} active rack assignment(s)",
        f"Step 2 - Totals: {total_used:,} documents stored across {total_capacity:,} slots",
        f"Step 3 - Utilization: {overall_utilization:.1f}%",
    ]
    if threshold_crossed is not None:
        steps.append(
            f"Step 4 - Status: above {threshold_crossed:.0f}% => {status.replace('_', ' ')}"
        )
    else:
        steps.append(f"Step 4 - Status: {status.replace('_', ' ')}")
    return steps
