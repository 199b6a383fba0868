"""Schema validation for uploaded reference data."""

from dataclasses import dataclass, field
from typing import List, Optional
import pandas as pd

from config.defaults import PRIORITY_TIERS, ASSIGNMENT_KINDS, ORDER_BY_POLICIES, RACK_STATUSES


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.is_valid = self.is_valid and other.is_valid
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self


CUSTOMER_REQUIRED_COLUMNS = [
    "Customer ID",
    "Customer Code",
    "Customer Name",
]

RACK_REQUIRED_COLUMNS = [
    "Rack ID",
    "Rack Code",
    "Warehouse",
    "Zone",
    "Shelf",
    "Capacity",
]

ASSIGNMENT_REQUIRED_COLUMNS = [
    "Assignment ID",
    "Customer ID",
    "Rack ID",
    "Assignment Type",
    "Priority Order",
]

RULE_REQUIRED_COLUMNS = [
    "Rule ID",
    "Rule Name",
]


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: File contains no data rows.")
    return result


def _active_mask(df: pd.DataFrame) -> pd.Series:
    if "Active" not in df.columns:
        return pd.Series(True, index=df.index)
    return df["Active"].apply(
        lambda v: True if pd.isna(v) else str(v).strip().lower() in ("true", "yes", "y", "1", "active")
    )


def validate_customers(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, CUSTOMER_REQUIRED_COLUMNS, "Customers")
    if not result.is_valid:
        return result

    dupes = df.duplicated(subset=["Customer ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Customers: Duplicate customer IDs: {df[dupes]['Customer ID'].unique().tolist()}")

    codes = df["Customer Code"].astype(str).str.strip().str.lower()
    if codes.duplicated().any():
        result.is_valid = False
        result.errors.append(
            f"Customers: Duplicate customer codes: {df[codes.duplicated(keep=False)]['Customer Code'].unique().tolist()}"
        )

    if "Priority Level" in df.columns:
        tiers = df["Priority Level"].dropna().astype(str).str.strip().str.lower()
        bad = sorted(set(tiers) - set(PRIORITY_TIERS))
        if bad:
            result.is_valid = False
            result.errors.append(f"Customers: Unknown priority levels {bad}. Use one of {PRIORITY_TIERS}.")

    return result


def validate_racks(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, RACK_REQUIRED_COLUMNS, "Racks")
    if not result.is_valid:
        return result

    if (df["Capacity"] < 0).any():
        result.is_valid = False
        result.errors.append("Racks: Capacity cannot be negative.")

    if "Current Count" in df.columns:
        if (df["Current Count"] < 0).any():
            result.is_valid = False
            result.errors.append("Racks: Current Count cannot be negative.")
        over = df[df["Current Count"] > df["Capacity"]]
        if not over.empty:
            result.warnings.append(
                f"Racks: Current count exceeds capacity for {over['Rack Code'].tolist()}. "
                "These racks will never be chosen for new documents."
            )

    if "Status" in df.columns:
        statuses = df["Status"].dropna().astype(str).str.strip().str.lower()
        unknown = sorted(set(statuses) - set(RACK_STATUSES))
        if unknown:
            result.warnings.append(f"Racks: Unknown statuses {unknown}. Expected one of {RACK_STATUSES}.")

    zero = df[df["Capacity"] == 0]
    if not zero.empty:
        result.warnings.append(f"Racks: Zero-capacity racks treated as full: {zero['Rack Code'].tolist()}")

    dupes = df.duplicated(subset=["Rack ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Racks: Duplicate rack IDs: {df[dupes]['Rack ID'].unique().tolist()}")

    return result


def validate_assignments(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, ASSIGNMENT_REQUIRED_COLUMNS, "Assignments")
    if not result.is_valid:
        return result

    kinds = df["Assignment Type"].astype(str).str.strip().str.lower()
    bad_kinds = sorted(set(kinds) - set(ASSIGNMENT_KINDS))
    if bad_kinds:
        result.is_valid = False
        result.errors.append(f"Assignments: Unknown assignment types {bad_kinds}. Use one of {ASSIGNMENT_KINDS}.")

    if "Capacity Threshold (%)" in df.columns:
        thresholds = df["Capacity Threshold (%)"].dropna()
        if ((thresholds < 0) | (thresholds > 100)).any():
            result.is_valid = False
            result.errors.append("Assignments: Capacity Threshold (%) must be between 0 and 100.")

    dupes = df.duplicated(subset=["Assignment ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Assignments: Duplicate assignment IDs: {df[dupes]['Assignment ID'].unique().tolist()}")

    # Scan order must be a total order per customer among active links
    active = df[_active_mask(df)]
    tied = active.duplicated(subset=["Customer ID", "Priority Order"], keep=False)
    if tied.any():
        result.is_valid = False
        pairs = active[tied][["Customer ID", "Priority Order"]].drop_duplicates().to_dict("records")
        result.errors.append(f"Assignments: Duplicate priority orders among active links: {pairs}")

    return result


def validate_rules(df: Optional[pd.DataFrame]) -> ValidationResult:
    if df is None:
        return ValidationResult()
    result = _check_required_columns(df, RULE_REQUIRED_COLUMNS, "Rules")
    if not result.is_valid:
        return result

    if "Order By" in df.columns:
        policies = df["Order By"].dropna().astype(str).str.strip().str.lower()
        bad = sorted(set(policies) - set(ORDER_BY_POLICIES))
        if bad:
            result.is_valid = False
            result.errors.append(f"Rules: Unknown ordering policies {bad}. Use one of {ORDER_BY_POLICIES}.")

    if "File Size Min" in df.columns and "File Size Max" in df.columns:
        bounded = df.dropna(subset=["File Size Min", "File Size Max"])
        if (bounded["File Size Min"] > bounded["File Size Max"]).any():
            result.is_valid = False
            result.errors.append("Rules: File Size Min cannot exceed File Size Max.")

    if "Capacity Threshold (%)" in df.columns:
        thresholds = df["Capacity Threshold (%)"].dropna()
        if ((thresholds < 0) | (thresholds > 100)).any():
            result.is_valid = False
            result.errors.append("Rules: Capacity Threshold (%) must be between 0 and 100.")

    return result


def validate_cross_file(
    customers_df: pd.DataFrame,
    racks_df: pd.DataFrame,
    assignments_df: pd.DataFrame,
) -> ValidationResult:
    """Check that every assignment points at a known customer and rack."""
    result = ValidationResult()
    customer_ids = set(customers_df["Customer ID"].astype(str).str.strip())
    rack_ids = set(racks_df["Rack ID"].astype(str).str.strip())
    linked_customers = set(assignments_df["Customer ID"].astype(str).str.strip())
    linked_racks = set(assignments_df["Rack ID"].astype(str).str.strip())

    unknown_customers = linked_customers - customer_ids
    unknown_racks = linked_racks - rack_ids

    if unknown_customers:
        result.is_valid = False
        result.errors.append(f"Assignments reference unknown customers: {', '.join(sorted(unknown_customers))}")
    if unknown_racks:
        result.is_valid = False
        result.errors.append(f"Assignments reference unknown racks: {', '.join(sorted(unknown_racks))}")

    unlinked = customer_ids - linked_customers
    if unlinked:
        result.warnings.append(
            f"Customers without rack assignments: {', '.join(sorted(unlinked))}. "
            "Their documents will need manual placement."
        )
    return result
