"""Assignment rules as templates that materialize customer rack links.

A rule names which customers it covers (glob on customer code), which racks
to prefer and fall back to (globs on rack code), the threshold to apply, and
how to order the racks it picks. Applying a rule writes ordinary Assignment
rows tagged with the rule id; the evaluator then treats them like any other
link, apart from honouring the rule's file-size bounds.
"""

import fnmatch
import logging
from typing import Dict, List, Optional, Set

from models.assignment import Assignment
from models.customer import Customer
from models.rack import Rack
from models.rule import AssignmentRule
from engine.catalog import build_rack_assignments
from config.defaults import ORDER_BY_POLICIES, PRIORITY_ORDER

logger = logging.getLogger(__name__)


def _glob_match(value: str, pattern: str) -> bool:
    return fnmatch.fnmatchcase(value.lower(), pattern.strip().lower())


def rule_matches_customer(rule: AssignmentRule, customer: Customer) -> bool:
    if not rule.customer_pattern:
        return True
    return _glob_match(customer.code, rule.customer_pattern)


def file_size_in_bounds(rule: AssignmentRule, file_size: int) -> bool:
    if file_size < (rule.file_size_min or 0):
        return False
    if rule.file_size_max is not None and file_size > rule.file_size_max:
        return False
    return True


def rule_accepts(rule: AssignmentRule, document_type: str, file_size: int) -> bool:
    """Whether a document of this type and size falls under the rule."""
    if rule.document_type_conditions and document_type not in rule.document_type_conditions:
        return False
    return file_size_in_bounds(rule, file_size)


def _pattern_index(rack: Rack, patterns: List[str]) -> Optional[int]:
    for i, pattern in enumerate(patterns):
        if _glob_match(rack.code, pattern):
            return i
    return None


def _order_group(group: List[tuple], order_by: str) -> List[Rack]:
    """Order (catalog_index, pattern_index, rack) tuples by the rule's policy."""
    if order_by == "capacity":
        key = lambda t: (-t[2].free_slots, t[0])
    elif order_by == "priority":
        key = lambda t: (t[1], t[0])
    else:
        key = lambda t: t[0]
    return [t[2] for t in sorted(group, key=key)]


def select_rule_racks(
    rule: AssignmentRule,
    racks: List[Rack],
    taken_rack_ids: Optional[Set[str]] = None,
) -> Dict[str, List[Rack]]:
    """Racks the rule would link, split into preferred and fallback groups.

    A rack matching both a preferred and a fallback pattern counts as
    preferred. Inactive racks and ``taken_rack_ids`` are never selected.
    """
    if rule.order_by not in ORDER_BY_POLICIES:
        raise ValueError(f"Unknown order_by '{rule.order_by}'. Use one of {ORDER_BY_POLICIES}.")

    taken = taken_rack_ids or set()
    preferred, fallback = [], []
    for catalog_index, rack in enumerate(racks):
        if not rack.is_active or rack.rack_id in taken:
            continue
        idx = _pattern_index(rack, rule.preferred_rack_patterns)
        if idx is not None:
            preferred.append((catalog_index, idx, rack))
            continue
        idx = _pattern_index(rack, rule.fallback_rack_patterns)
        if idx is not None:
            fallback.append((catalog_index, idx, rack))

    return {
        "preferred": _order_group(preferred, rule.order_by),
        "fallback": _order_group(fallback, rule.order_by),
    }


def materialize_rule(
    rule: AssignmentRule,
    customers: List[Customer],
    racks: List[Rack],
    assignments: List[Assignment],
) -> List[Assignment]:
    """New Assignment rows the rule generates for every customer it covers.

    Preferred racks become dedicated links, fallback racks overflow links
    tried after them. Only unassigned racks are used: a rack with an active
    link to any customer, including one created earlier in the same run, is
    skipped, so applying a rule twice adds nothing the second time.
    """
    if not rule.is_active:
        logger.info("Rule %s is inactive, nothing to apply", rule.rule_name)
        return []

    created: List[Assignment] = []
    for customer in customers:
        if not rule_matches_customer(rule, customer):
            continue

        linked = {a.rack_id for a in assignments + created if a.is_active}
        groups = select_rule_racks(rule, racks, taken_rack_ids=linked)

        for kind, group in (("dedicated", groups["preferred"]), ("overflow", groups["fallback"])):
            if not group:
                continue
            created.extend(build_rack_assignments(
                customer_id=customer.customer_id,
                rack_ids=[r.rack_id for r in group],
                kind=kind,
                capacity_threshold_pct=rule.capacity_threshold_pct,
                document_types=list(rule.document_type_conditions),
                existing=assignments + created,
                notes=f"Generated by rule '{rule.rule_name}'",
                source_rule_id=rule.rule_id,
            ))

    logger.info("Rule %s produced %d assignment(s)", rule.rule_name, len(created))
    return created


def matching_rules(
    rules: List[AssignmentRule],
    customer: Customer,
    document_type: str,
    file_size: int,
) -> List[AssignmentRule]:
    """Active rules covering this customer and document, highest priority level first."""
    hits = [
        r for r in rules
        if r.is_active and rule_matches_customer(r, customer) and rule_accepts(r, document_type, file_size)
    ]
    return sorted(hits, key=lambda r: (PRIORITY_ORDER.get(r.priority_level, 3), r.rule_name))
