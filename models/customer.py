from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Customer:
    customer_id: str
    code: str
    name: str
    priority_tier: str = "medium"     # "high", "medium", "low"
    accepted_document_types: List[str] = field(default_factory=list)
    auto_assign_enabled: bool = True
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None

    def accepts(self, document_type: str) -> bool:
        """Empty accepted list means the customer archives any document type."""
        return not self.accepted_document_types or document_type in self.accepted_document_types


@dataclass
class CustomerRollup:
    """Capacity totals across a customer's active rack assignments."""
    customer_id: str
    customer_name: str
    assignment_count: int
    total_capacity: int
    total_used: int
    overall_utilization: float    # percent, 0-100+
    status: str                   # "active", "needs_attention", "over_capacity"
