"""Tests for upload parsing, validation, and the sample dataset."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pandas as pd

from data.loader import parse_customers, parse_racks, parse_assignments, parse_rules, _split_list
from data.validator import (
    validate_customers,
    validate_racks,
    validate_assignments,
    validate_rules,
    validate_cross_file,
)
from data.sample_data import (
    generate_customers_df,
    generate_racks_df,
    generate_assignments_df,
    generate_rules_df,
)


def make_racks_df(rows=None):
    return pd.DataFrame(rows or [
        {"Rack ID": "r1", "Rack Code": "R1", "Warehouse": "WH1", "Zone": "A", "Shelf": "S1",
         "Capacity": 100, "Current Count": 10},
    ])


def make_assignments_df(rows=None):
    return pd.DataFrame(rows or [
        {"Assignment ID": "a1", "Customer ID": "c1", "Rack ID": "r1",
         "Assignment Type": "dedicated", "Priority Order": 1, "Capacity Threshold (%)": 90},
    ])


class TestLoader:
    def test_split_list(self):
        assert _split_list("contract; invoice,receipt") == ["contract", "invoice", "receipt"]
        assert _split_list(float("nan")) == []
        assert _split_list("") == []

    def test_parse_customers_defaults(self):
        df = pd.DataFrame([{"Customer ID": "c1", "Customer Code": "ACME", "Customer Name": "Acme"}])
        customer = parse_customers(df)[0]
        assert customer.priority_tier == "medium"
        assert customer.accepted_document_types == []
        assert customer.auto_assign_enabled is True

    def test_parse_racks(self):
        rack = parse_racks(make_racks_df())[0]
        assert rack.path == "WH1 > A > S1 > R1"
        assert rack.current_count == 10
        assert rack.is_active

    def test_parse_assignment_threshold_default(self):
        df = make_assignments_df([
            {"Assignment ID": "a1", "Customer ID": "c1", "Rack ID": "r1",
             "Assignment Type": "Overflow", "Priority Order": 2, "Active": "no"},
        ])
        a = parse_assignments(df)[0]
        assert a.kind == "overflow"
        assert a.capacity_threshold_pct == 90.0
        assert a.is_active is False

    def test_parse_rules(self):
        rule = parse_rules(generate_rules_df())[0]
        assert rule.customer_pattern == "ACME-*"
        assert rule.file_size_min == 5_000_000
        assert rule.file_size_max is None
        assert rule.order_by == "capacity"


class TestValidator:
    def test_missing_columns(self):
        result = validate_racks(pd.DataFrame([{"Rack ID": "r1"}]))
        assert not result.is_valid
        assert "Missing required columns" in result.errors[0]

    def test_negative_capacity(self):
        df = make_racks_df([
            {"Rack ID": "r1", "Rack Code": "R1", "Warehouse": "W", "Zone": "Z", "Shelf": "S",
             "Capacity": -5, "Current Count": 0},
        ])
        assert not validate_racks(df).is_valid

    def test_overfull_and_zero_capacity_warn(self):
        df = make_racks_df([
            {"Rack ID": "r1", "Rack Code": "R1", "Warehouse": "W", "Zone": "Z", "Shelf": "S",
             "Capacity": 10, "Current Count": 12},
            {"Rack ID": "r2", "Rack Code": "R2", "Warehouse": "W", "Zone": "Z", "Shelf": "S",
             "Capacity": 0, "Current Count": 0},
        ])
        result = validate_racks(df)
        assert result.is_valid
        assert len(result.warnings) == 2

    def test_duplicate_customer_codes(self):
        df = pd.DataFrame([
            {"Customer ID": "c1", "Customer Code": "ACME", "Customer Name": "A"},
            {"Customer ID": "c2", "Customer Code": "acme", "Customer Name": "B"},
        ])
        assert not validate_customers(df).is_valid

    def test_tied_priority_orders_rejected(self):
        df = make_assignments_df([
            {"Assignment ID": "a1", "Customer ID": "c1", "Rack ID": "r1",
             "Assignment Type": "dedicated", "Priority Order": 1},
            {"Assignment ID": "a2", "Customer ID": "c1", "Rack ID": "r2",
             "Assignment Type": "overflow", "Priority Order": 1},
        ])
        result = validate_assignments(df)
        assert not result.is_valid
        assert "Duplicate priority orders" in result.errors[0]

    def test_tie_with_inactive_link_allowed(self):
        df = make_assignments_df([
            {"Assignment ID": "a1", "Customer ID": "c1", "Rack ID": "r1",
             "Assignment Type": "dedicated", "Priority Order": 1, "Active": True},
            {"Assignment ID": "a2", "Customer ID": "c1", "Rack ID": "r2",
             "Assignment Type": "overflow", "Priority Order": 1, "Active": False},
        ])
        assert validate_assignments(df).is_valid

    def test_threshold_out_of_range(self):
        df = make_assignments_df([
            {"Assignment ID": "a1", "Customer ID": "c1", "Rack ID": "r1",
             "Assignment Type": "dedicated", "Priority Order": 1, "Capacity Threshold (%)": 150},
        ])
        assert not validate_assignments(df).is_valid

    def test_rules_optional(self):
        assert validate_rules(None).is_valid

    def test_rule_size_bounds(self):
        df = pd.DataFrame([{"Rule ID": "x", "Rule Name": "x", "File Size Min": 10, "File Size Max": 5}])
        assert not validate_rules(df).is_valid

    def test_cross_file_unknown_rack(self):
        customers = pd.DataFrame([{"Customer ID": "c1", "Customer Code": "A", "Customer Name": "A"}])
        assignments = make_assignments_df([
            {"Assignment ID": "a1", "Customer ID": "c1", "Rack ID": "ghost",
             "Assignment Type": "dedicated", "Priority Order": 1},
        ])
        result = validate_cross_file(customers, make_racks_df(), assignments)
        assert not result.is_valid
        assert "ghost" in result.errors[0]


class TestSampleData:
    def test_sample_data_is_valid(self):
        customers, racks, assignments, rules = (
            generate_customers_df(), generate_racks_df(), generate_assignments_df(), generate_rules_df(),
        )
        for result in (
            validate_customers(customers),
            validate_racks(racks),
            validate_assignments(assignments),
            validate_rules(rules),
            validate_cross_file(customers, racks, assignments),
        ):
            assert result.errors == []

    def test_sample_data_is_deterministic(self):
        pd.testing.assert_frame_equal(generate_racks_df(), generate_racks_df())

    def test_some_racks_left_unassigned(self):
        racks = generate_racks_df()
        linked = set(generate_assignments_df()["Rack ID"])
        assert len(set(racks["Rack ID"]) - linked) > 0
