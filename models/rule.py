from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AssignmentRule:
    rule_id: str
    rule_name: str
    customer_pattern: Optional[str] = None      # glob on customer code, None = all
    document_type_conditions: List[str] = field(default_factory=list)
    file_size_min: int = 0                      # bytes, inclusive
    file_size_max: Optional[int] = None         # bytes, inclusive, None = unbounded
    priority_level: str = "medium"
    preferred_rack_patterns: List[str] = field(default_factory=list)
    fallback_rack_patterns: List[str] = field(default_factory=list)
    capacity_threshold_pct: float = 90.0
    order_by: str = "chronological"             # "chronological", "capacity", "priority"
    is_active: bool = True
