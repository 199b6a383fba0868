from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class AuditEntry:
    timestamp: datetime
    action: str              # "upload", "create_customer", "assign_racks", "retire", "apply_rule", "place_document", ...
    entity_type: str         # "customer", "assignment", "rule", "rack", "dataset", "global"
    entity_id: Optional[str]
    field_changed: str
    old_value: str
    new_value: str
    rationale: str = ""
