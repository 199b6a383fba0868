"""Customer registry and rack-link operations performed by operators."""

import copy
import logging
import uuid
from datetime import date
from typing import List, Optional

from models.assignment import Assignment
from models.customer import Customer
from models.rack import Rack
from engine.errors import DuplicateCustomerError
from config.defaults import (
    PRIORITY_TIERS, DEFAULT_PRIORITY_TIER,
    ASSIGNMENT_KINDS, DEFAULT_CAPACITY_THRESHOLD_PCT,
)

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def create_customer(
    existing: List[Customer],
    code: str,
    name: str,
    priority_tier: str = DEFAULT_PRIORITY_TIER,
    accepted_document_types: Optional[List[str]] = None,
    auto_assign_enabled: bool = True,
    contact_email: Optional[str] = None,
    contact_phone: Optional[str] = None,
    address: Optional[str] = None,
    customer_id: Optional[str] = None,
) -> Customer:
    """Build a new Customer, rejecting codes already in the registry."""
    code = code.strip()
    if not code or not name.strip():
        raise ValueError("Customer code and name are required.")

    if any(c.code.lower() == code.lower() for c in existing):
        raise DuplicateCustomerError(
            f"Customer code '{code}' is already registered", details={"code": code},
        )

    tier = (priority_tier or DEFAULT_PRIORITY_TIER).strip().lower()
    if tier not in PRIORITY_TIERS:
        raise ValueError(f"Unknown priority tier '{priority_tier}'. Use one of {PRIORITY_TIERS}.")

    customer = Customer(
        customer_id=customer_id or new_id("cust"),
        code=code,
        name=name.strip(),
        priority_tier=tier,
        accepted_document_types=sorted({t.strip() for t in (accepted_document_types or []) if t.strip()}),
        auto_assign_enabled=auto_assign_enabled,
        contact_email=contact_email or None,
        contact_phone=contact_phone or None,
        address=address or None,
    )
    logger.info("Created customer %s (%s)", customer.code, customer.customer_id)
    return customer


def customer_assignments(customer_id: str, assignments: List[Assignment]) -> List[Assignment]:
    """The customer's active links in priority order."""
    active = [a for a in assignments if a.customer_id == customer_id and a.is_active]
    return sorted(active, key=lambda a: (a.priority_order, a.assignment_id))


def next_priority_order(customer_id: str, assignments: List[Assignment]) -> int:
    orders = [a.priority_order for a in assignments if a.customer_id == customer_id and a.is_active]
    return max(orders) + 1 if orders else 1


def available_racks(racks: List[Rack], assignments: List[Assignment]) -> List[Rack]:
    """Active racks not linked to any customer by an active assignment."""
    taken = {a.rack_id for a in assignments if a.is_active}
    return [r for r in racks if r.is_active and r.rack_id not in taken]


def build_rack_assignments(
    customer_id: str,
    rack_ids: List[str],
    kind: str,
    capacity_threshold_pct: float,
    document_types: List[str],
    existing: List[Assignment],
    notes: str = "",
    source_rule_id: Optional[str] = None,
    assigned_date: Optional[date] = None,
) -> List[Assignment]:
    """Create links from a customer to racks, tried in the order given.

    Priority orders continue after the customer's highest active order so they
    stay unique per customer.
    """
    if kind not in ASSIGNMENT_KINDS:
        raise ValueError(f"Unknown assignment kind '{kind}'. Use one of {ASSIGNMENT_KINDS}.")
    if capacity_threshold_pct is None:
        capacity_threshold_pct = DEFAULT_CAPACITY_THRESHOLD_PCT
    if not 0 <= capacity_threshold_pct <= 100:
        raise ValueError("Capacity threshold must be between 0 and 100.")

    start = next_priority_order(customer_id, existing)
    today = assigned_date or date.today()
    created = []
    for offset, rack_id in enumerate(rack_ids):
        created.append(Assignment(
            assignment_id=new_id("asg"),
            customer_id=customer_id,
            rack_id=rack_id,
            kind=kind,
            priority_order=start + offset,
            capacity_threshold_pct=float(capacity_threshold_pct),
            document_types=list(document_types or []),
            assigned_date=today,
            notes=notes,
            source_rule_id=source_rule_id,
        ))
    logger.info("Linked %d rack(s) to customer %s", len(created), customer_id)
    return created


def retire_assignment(assignments: List[Assignment], assignment_id: str) -> List[Assignment]:
    """Soft-delete a link. Returns a new list; the row is kept with is_active=False."""
    if not any(a.assignment_id == assignment_id for a in assignments):
        raise KeyError(f"Unknown assignment {assignment_id}")

    updated = []
    for a in assignments:
        if a.assignment_id == assignment_id:
            a = copy.copy(a)
            a.is_active = False
        updated.append(a)
    logger.info("Retired assignment %s", assignment_id)
    return updated
