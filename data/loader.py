"""File upload parsing: CSV/XLSX into typed model lists."""

import re
import pandas as pd
from typing import List, Optional, Tuple
from models.customer import Customer
from models.rack import Rack
from models.assignment import Assignment
from models.rule import AssignmentRule
from config.defaults import DEFAULT_CAPACITY_THRESHOLD_PCT, DEFAULT_PRIORITY_TIER, DEFAULT_ORDER_BY


def _split_list(value) -> List[str]:
    """'contract; invoice' or 'contract,invoice' -> ['contract', 'invoice']."""
    if value is None or (not isinstance(value, (list, tuple)) and pd.isna(value)):
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in re.split(r"[;,]", str(value)) if part.strip()]


def _parse_bool(value, default: bool = True) -> bool:
    if value is None or (not isinstance(value, bool) and pd.isna(value)):
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "yes", "y", "1", "active")


def _optional(row, df: pd.DataFrame, column: str) -> Optional[str]:
    if column in df.columns and pd.notna(row.get(column)):
        text = str(row[column]).strip()
        return text or None
    return None


def parse_customers(df: pd.DataFrame) -> List[Customer]:
    """Convert a customers DataFrame into Customer objects."""
    customers = []
    for _, row in df.iterrows():
        tier = _optional(row, df, "Priority Level") or DEFAULT_PRIORITY_TIER
        customers.append(Customer(
            customer_id=str(row["Customer ID"]).strip(),
            code=str(row["Customer Code"]).strip(),
            name=str(row["Customer Name"]).strip(),
            priority_tier=tier.lower(),
            accepted_document_types=_split_list(row.get("Document Types")),
            auto_assign_enabled=_parse_bool(row.get("Auto Assignment")),
            contact_email=_optional(row, df, "Contact Email"),
            contact_phone=_optional(row, df, "Contact Phone"),
            address=_optional(row, df, "Address"),
        ))
    return customers


def parse_racks(df: pd.DataFrame) -> List[Rack]:
    """Convert a racks DataFrame into Rack objects."""
    racks = []
    for _, row in df.iterrows():
        count = row.get("Current Count")
        racks.append(Rack(
            rack_id=str(row["Rack ID"]).strip(),
            code=str(row["Rack Code"]).strip(),
            warehouse_name=str(row["Warehouse"]).strip(),
            zone_name=str(row["Zone"]).strip(),
            shelf_name=str(row["Shelf"]).strip(),
            capacity=int(row["Capacity"]) if pd.notna(row["Capacity"]) else 0,
            current_count=int(count) if count is not None and pd.notna(count) else 0,
            status=_optional(row, df, "Status") or "available",
            is_active=_parse_bool(row.get("Active")),
        ))
    return racks


def parse_assignments(df: pd.DataFrame) -> List[Assignment]:
    """Convert an assignments DataFrame into Assignment objects."""
    assignments = []
    for _, row in df.iterrows():
        threshold = row.get("Capacity Threshold (%)")
        assigned = row.get("Assigned Date")
        assignments.append(Assignment(
            assignment_id=str(row["Assignment ID"]).strip(),
            customer_id=str(row["Customer ID"]).strip(),
            rack_id=str(row["Rack ID"]).strip(),
            kind=str(row["Assignment Type"]).strip().lower(),
            priority_order=int(row["Priority Order"]),
            capacity_threshold_pct=(
                float(threshold) if threshold is not None and pd.notna(threshold)
                else DEFAULT_CAPACITY_THRESHOLD_PCT
            ),
            document_types=_split_list(row.get("Document Types")),
            is_active=_parse_bool(row.get("Active")),
            assigned_date=(
                pd.to_datetime(assigned).date() if assigned is not None and pd.notna(assigned) else None
            ),
            notes=_optional(row, df, "Notes") or "",
            source_rule_id=_optional(row, df, "Source Rule ID"),
        ))
    return assignments


def parse_rules(df: pd.DataFrame) -> List[AssignmentRule]:
    """Convert an assignment rules DataFrame into AssignmentRule objects."""
    rules = []
    for _, row in df.iterrows():
        size_min = row.get("File Size Min")
        size_max = row.get("File Size Max")
        threshold = row.get("Capacity Threshold (%)")
        rules.append(AssignmentRule(
            rule_id=str(row["Rule ID"]).strip(),
            rule_name=str(row["Rule Name"]).strip(),
            customer_pattern=_optional(row, df, "Customer Pattern"),
            document_type_conditions=_split_list(row.get("Document Types")),
            file_size_min=int(size_min) if size_min is not None and pd.notna(size_min) else 0,
            file_size_max=int(size_max) if size_max is not None and pd.notna(size_max) else None,
            priority_level=(_optional(row, df, "Priority Level") or DEFAULT_PRIORITY_TIER).lower(),
            preferred_rack_patterns=_split_list(row.get("Preferred Racks")),
            fallback_rack_patterns=_split_list(row.get("Fallback Racks")),
            capacity_threshold_pct=(
                float(threshold) if threshold is not None and pd.notna(threshold)
                else DEFAULT_CAPACITY_THRESHOLD_PCT
            ),
            order_by=(_optional(row, df, "Order By") or DEFAULT_ORDER_BY).lower(),
            is_active=_parse_bool(row.get("Active")),
        ))
    return rules


def load_file(uploaded_file) -> pd.DataFrame:
    """Load an uploaded file (CSV or XLSX) into a DataFrame."""
    name = uploaded_file.name.lower()
    if name.endswith(".csv"):
        return pd.read_csv(uploaded_file)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        return pd.read_excel(uploaded_file, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")


# Expected sheet names for multi-tab Excel (case-insensitive matching)
SHEET_ALIASES = {
    "customers": ["customers", "customer", "customer registry", "clients"],
    "racks": ["racks", "rack", "rack catalog", "locations", "storage locations"],
    "assignments": ["assignments", "assignment", "rack assignments", "customer rack assignments", "links"],
    "rules": ["rules", "rule", "assignment rules"],
}


def _match_sheet(sheet_names: List[str], category: str, required: bool = True) -> Optional[str]:
    """Find a sheet name matching the given category. Returns the matched name or raises."""
    aliases = SHEET_ALIASES[category]
    lower_map = {s.lower().strip(): s for s in sheet_names}
    for alias in aliases:
        if alias in lower_map:
            return lower_map[alias]
    if not required:
        return None
    raise ValueError(
        f"Could not find a sheet for '{category}'. "
        f"Expected one of: {aliases}. "
        f"Found sheets: {sheet_names}"
    )


def load_multi_sheet_excel(
    uploaded_file,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame, Optional[pd.DataFrame]]:
    """Load a single Excel workbook with Customers, Racks, Assignments and optional Rules tabs.

    Returns (customers_df, racks_df, assignments_df, rules_df or None).
    """
    xl = pd.ExcelFile(uploaded_file, engine="openpyxl")
    sheet_names = xl.sheet_names

    customers_df = pd.read_excel(xl, sheet_name=_match_sheet(sheet_names, "customers"))
    racks_df = pd.read_excel(xl, sheet_name=_match_sheet(sheet_names, "racks"))
    assignments_df = pd.read_excel(xl, sheet_name=_match_sheet(sheet_names, "assignments"))

    rules_sheet = _match_sheet(sheet_names, "rules", required=False)
    rules_df = pd.read_excel(xl, sheet_name=rules_sheet) if rules_sheet else None

    return customers_df, racks_df, assignments_df, rules_df
