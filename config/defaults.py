"""Default configuration constants for the Archive Rack Assignment Planner."""

# Customer priority tiers (also used by assignment rules)
PRIORITY_TIERS = ["high", "medium", "low"]
DEFAULT_PRIORITY_TIER = "medium"

# Sort order for priority tiers, highest first
PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2, None: 3}

# Assignment link kinds
ASSIGNMENT_KINDS = ["dedicated", "shared", "overflow"]
DEFAULT_ASSIGNMENT_KIND = "dedicated"

# Rule ordering policies
ORDER_BY_POLICIES = ["chronological", "capacity", "priority"]
DEFAULT_ORDER_BY = "chronological"

# Capacity threshold applied when an assignment does not specify one (percent)
DEFAULT_CAPACITY_THRESHOLD_PCT = 90.0

# Utilization reported for a rack with zero capacity (100 = permanently saturated)
ZERO_CAPACITY_UTILIZATION_PCT = 100.0

# Customer rollup status thresholds (strictly greater than)
OVER_CAPACITY_PCT = 95.0
NEEDS_ATTENTION_PCT = 85.0

# Customers below this are reported as surplus capacity
LOW_UTILIZATION_PCT = 20.0

# Capacity indicator bands (greater than or equal)
CAPACITY_BANDS = [
    (95.0, "critical"),
    (85.0, "high"),
    (75.0, "elevated"),
]

# Rack planner target utilization after adding racks
TARGET_UTILIZATION_PCT = 85.0

# Rack statuses
RACK_STATUSES = ["available", "full", "maintenance", "over-capacity"]

# Decision failure kinds
FAILURE_NO_ASSIGNMENTS = "NO_ASSIGNMENTS"
FAILURE_ALL_AT_CAPACITY = "ALL_AT_CAPACITY"

# Operator-facing decision messages
NO_ASSIGNMENTS_MESSAGE = "No suitable racks assigned to this customer"
ALL_AT_CAPACITY_MESSAGE = "All assigned racks are at capacity"
ALL_AT_CAPACITY_ACTION = "Assign additional racks or increase capacity thresholds"

# Document types offered in forms
COMMON_DOCUMENT_TYPES = [
    "contract",
    "invoice",
    "receipt",
    "legal",
    "hr",
    "financial",
    "correspondence",
]

# Log level used when ARCHIVE_LOG_LEVEL is not set
DEFAULT_LOG_LEVEL = "INFO"
