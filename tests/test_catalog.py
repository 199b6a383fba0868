"""Tests for customer registry and rack-link operations."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.assignment import Assignment
from models.customer import Customer
from models.rack import Rack
from engine.catalog import (
    create_customer,
    customer_assignments,
    next_priority_order,
    available_racks,
    build_rack_assignments,
    retire_assignment,
)
from engine.errors import DuplicateCustomerError


def make_rack(rack_id="R1", capacity=100, count=0, active=True):
    return Rack(rack_id, rack_id, "WH1", "A", "S1", capacity, count, is_active=active)


def make_link(asg_id, rack_id, customer="C1", order=1, active=True):
    return Assignment(asg_id, customer, rack_id, "dedicated", order, 90.0, is_active=active)


class TestCreateCustomer:
    def test_creates_with_normalized_fields(self):
        customer = create_customer([], " ACME-001 ", " Acme Corp ", "High", ["invoice", "contract", "invoice"])
        assert customer.code == "ACME-001"
        assert customer.name == "Acme Corp"
        assert customer.priority_tier == "high"
        assert customer.accepted_document_types == ["contract", "invoice"]
        assert customer.customer_id.startswith("cust-")

    def test_duplicate_code_rejected_case_insensitive(self):
        existing = [Customer("c1", "ACME-001", "Acme")]
        with pytest.raises(DuplicateCustomerError):
            create_customer(existing, "acme-001", "Other")

    def test_missing_name_rejected(self):
        with pytest.raises(ValueError):
            create_customer([], "X-1", "  ")

    def test_bad_tier_rejected(self):
        with pytest.raises(ValueError):
            create_customer([], "X-1", "X", priority_tier="urgent")


class TestRackLinks:
    def test_priority_orders_continue(self):
        existing = [make_link("A1", "R1", order=1), make_link("A2", "R2", order=4)]
        created = build_rack_assignments("C1", ["R3", "R4"], "overflow", 80.0, [], existing)
        assert [a.priority_order for a in created] == [5, 6]
        assert all(a.kind == "overflow" for a in created)

    def test_first_link_starts_at_one(self):
        assert next_priority_order("C9", [make_link("A1", "R1")]) == 1

    def test_inactive_orders_ignored(self):
        existing = [make_link("A1", "R1", order=7, active=False)]
        assert next_priority_order("C1", existing) == 1

    def test_invalid_kind(self):
        with pytest.raises(ValueError):
            build_rack_assignments("C1", ["R1"], "borrowed", 90.0, [], [])

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            build_rack_assignments("C1", ["R1"], "dedicated", 120.0, [], [])

    def test_available_racks_excludes_linked_and_inactive(self):
        racks = [make_rack("R1"), make_rack("R2"), make_rack("R3", active=False)]
        links = [make_link("A1", "R1"), make_link("A2", "R2", active=False)]
        assert [r.rack_id for r in available_racks(racks, links)] == ["R2"]

    def test_customer_assignments_sorted(self):
        links = [make_link("A2", "R2", order=2), make_link("A1", "R1", order=1)]
        assert [a.assignment_id for a in customer_assignments("C1", links)] == ["A1", "A2"]


class TestRetireAssignment:
    def test_soft_delete_returns_new_list(self):
        original = [make_link("A1", "R1"), make_link("A2", "R2", order=2)]
        updated = retire_assignment(original, "A1")

        assert updated[0].is_active is False
        assert original[0].is_active is True
        assert updated[1] is original[1]

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            retire_assignment([], "nope")
