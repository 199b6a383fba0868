"""Generate synthetic reference data for the Archive Rack Assignment Planner."""

import pandas as pd
import random
import os


def generate_racks_df() -> pd.DataFrame:
    """Rack catalog: 2 warehouses, 2 zones each, 2 shelves per zone, 3 racks per shelf."""
    random.seed(42)
    rows = []
    warehouses = [("WH1", "Central Archive"), ("WH2", "Offsite Vault")]
    for wh_code, wh_name in warehouses:
        for zone in ("A", "B"):
            for shelf in range(1, 3):
                for rack in range(1, 4):
                    code = f"{wh_code}-{zone}{shelf}-R{rack}"
                    capacity = random.choice([50, 80, 100, 120])
                    rows.append({
                        "Rack ID": f"rack-{code.lower()}",
                        "Rack Code": code,
                        "Warehouse": wh_name,
                        "Zone": f"Zone {zone}",
                        "Shelf": f"Shelf {shelf}",
                        "Capacity": capacity,
                        "Current Count": round(capacity * random.uniform(0.1, 0.98)),
                        "Status": "available",
                        "Active": True,
                    })
    return pd.DataFrame(rows)


def generate_customers_df() -> pd.DataFrame:
    """Customer registry for 6 archive customers."""
    profiles = [
        {"Customer ID": "cust-acme",    "Customer Code": "ACME-001", "Customer Name": "Acme Logistics",      "Priority Level": "high",   "Document Types": "contract; invoice",   "Auto Assignment": True},
        {"Customer ID": "cust-bluesky", "Customer Code": "BLUE-002", "Customer Name": "Bluesky Insurance",   "Priority Level": "high",   "Document Types": "contract; legal",     "Auto Assignment": True},
        {"Customer ID": "cust-cedar",   "Customer Code": "CEDR-003", "Customer Name": "Cedar Health",        "Priority Level": "medium", "Document Types": "hr; correspondence",  "Auto Assignment": True},
        {"Customer ID": "cust-delta",   "Customer Code": "DELT-004", "Customer Name": "Delta Municipal",     "Priority Level": "medium", "Document Types": "",                    "Auto Assignment": True},
        {"Customer ID": "cust-evergrn", "Customer Code": "EVGR-005", "Customer Name": "Evergreen Law",       "Priority Level": "low",    "Document Types": "legal",               "Auto Assignment": False},
        {"Customer ID": "cust-fjord",   "Customer Code": "FJRD-006", "Customer Name": "Fjord Shipping",      "Priority Level": "low",    "Document Types": "invoice; receipt",    "Auto Assignment": True},
    ]
    return pd.DataFrame(profiles)


def generate_assignments_df() -> pd.DataFrame:
    """Customer-to-rack links; a few racks are left unassigned for the planner."""
    links = [
        ("cust-acme",    "WH1-A1-R1", "dedicated", 90, ""),
        ("cust-acme",    "WH1-A1-R2", "dedicated", 90, ""),
        ("cust-acme",    "WH2-A1-R1", "overflow",  95, ""),
        ("cust-bluesky", "WH1-A2-R1", "dedicated", 85, "contract"),
        ("cust-bluesky", "WH1-A2-R2", "shared",    90, ""),
        ("cust-cedar",   "WH1-B1-R1", "dedicated", 90, ""),
        ("cust-cedar",   "WH1-B1-R2", "overflow",  95, "hr"),
        ("cust-delta",   "WH1-B2-R1", "dedicated", 80, ""),
        ("cust-evergrn", "WH2-B1-R1", "dedicated", 90, "legal"),
        ("cust-fjord",   "WH2-B2-R1", "shared",    90, ""),
        ("cust-fjord",   "WH2-B2-R2", "overflow",  95, ""),
    ]
    rows = []
    order_by_customer = {}
    for i, (customer_id, rack_code, kind, threshold, doc_types) in enumerate(links, start=1):
        order = order_by_customer.get(customer_id, 0) + 1
        order_by_customer[customer_id] = order
        rows.append({
            "Assignment ID": f"asg-{i:03d}",
            "Customer ID": customer_id,
            "Rack ID": f"rack-{rack_code.lower()}",
            "Assignment Type": kind,
            "Priority Order": order,
            "Capacity Threshold (%)": threshold,
            "Document Types": doc_types,
            "Active": True,
            "Assigned Date": "2025-01-15",
            "Notes": "",
        })
    return pd.DataFrame(rows)


def generate_rules_df() -> pd.DataFrame:
    """Two assignment rule templates."""
    return pd.DataFrame([
        {
            "Rule ID": "rule-large-contracts",
            "Rule Name": "Large contract scans",
            "Customer Pattern": "ACME-*",
            "Document Types": "contract",
            "File Size Min": 5_000_000,
            "File Size Max": None,
            "Priority Level": "high",
            "Preferred Racks": "WH2-A2-*",
            "Fallback Racks": "WH2-B*",
            "Capacity Threshold (%)": 85,
            "Order By": "capacity",
            "Active": True,
        },
        {
            "Rule ID": "rule-legal-offsite",
            "Rule Name": "Legal offsite vault",
            "Customer Pattern": "*-005",
            "Document Types": "legal",
            "File Size Min": 0,
            "File Size Max": None,
            "Priority Level": "medium",
            "Preferred Racks": "WH2-B1-*",
            "Fallback Racks": "",
            "Capacity Threshold (%)": 90,
            "Order By": "chronological",
            "Active": True,
        },
    ])


def generate_sample_csvs(output_dir: str):
    """Write sample CSV files to the given directory."""
    os.makedirs(output_dir, exist_ok=True)
    generate_customers_df().to_csv(os.path.join(output_dir, "customers.csv"), index=False)
    generate_racks_df().to_csv(os.path.join(output_dir, "racks.csv"), index=False)
    generate_assignments_df().to_csv(os.path.join(output_dir, "assignments.csv"), index=False)
    generate_rules_df().to_csv(os.path.join(output_dir, "rules.csv"), index=False)


def generate_sample_excel(output_dir: str):
    """Write a single multi-tab Excel file with all datasets."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, "sample_data.xlsx")
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        generate_customers_df().to_excel(writer, sheet_name="Customers", index=False)
        generate_racks_df().to_excel(writer, sheet_name="Racks", index=False)
        generate_assignments_df().to_excel(writer, sheet_name="Assignments", index=False)
        generate_rules_df().to_excel(writer, sheet_name="Rules", index=False)


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "..", "sample_files")
    generate_sample_csvs(out)
    generate_sample_excel(out)
    print("Sample CSV and Excel files generated in sample_files/")
