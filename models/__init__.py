from models.customer import Customer, CustomerRollup
from models.rack import Rack
from models.assignment import Assignment, AssignmentDecision, RackPlacement
from models.rule import AssignmentRule
from models.audit import AuditEntry
