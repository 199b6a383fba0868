from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class Assignment:
    assignment_id: str
    customer_id: str
    rack_id: str
    kind: str                        # "dedicated", "shared", "overflow"
    priority_order: int              # ascending = tried first
    capacity_threshold_pct: float    # e.g. 90.0 for 90%
    document_types: List[str] = field(default_factory=list)  # empty = all types
    is_active: bool = True
    assigned_date: Optional[date] = None
    notes: str = ""
    source_rule_id: Optional[str] = None  # set when materialized from a rule

    def accepts(self, document_type: str) -> bool:
        return not self.document_types or document_type in self.document_types


@dataclass
class RackPlacement:
    """The rack an evaluation chose, with a simulated post-placement utilization."""
    rack_id: str
    rack_code: str
    path: str
    capacity: int
    current_count: int
    utilization_pct: float
    utilization_after_pct: float


@dataclass
class AssignmentDecision:
    success: bool
    message: str
    failure_kind: Optional[str] = None   # "NO_ASSIGNMENTS", "ALL_AT_CAPACITY"
    assigned_rack: Optional[RackPlacement] = None
    assignment: Optional[Assignment] = None
    suggested_action: Optional[str] = None
    explanation_steps: List[str] = field(default_factory=list)
