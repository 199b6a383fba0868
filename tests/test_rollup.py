"""Tests for customer rollups and alerts."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.assignment import Assignment
from models.customer import Customer
from models.rack import Rack
from engine.rollup import (
    classify_utilization,
    compute_customer_rollup,
    compute_all_rollups,
    summarize_portfolio,
    compute_utilization_alerts,
    capacity_band,
    get_rack_utilization,
    explain_customer_rollup,
)


def make_customer(cid="C1", name="Acme"):
    return Customer(cid, cid.upper(), name)


def make_rack(rack_id="R1", capacity=100, count=0):
    return Rack(rack_id, rack_id, "WH1", "A", "S1", capacity, count)


def make_link(asg_id, rack_id, customer="C1", order=1, active=True, kind="dedicated"):
    return Assignment(asg_id, customer, rack_id, kind, order, 90.0, is_active=active)


class TestClassifyUtilization:
    def test_boundaries_are_strict(self):
        assert classify_utilization(85.0) == "active"
        assert classify_utilization(86.0) == "needs_attention"
        assert classify_utilization(95.0) == "needs_attention"
        assert classify_utilization(96.0) == "over_capacity"

    def test_configured_thresholds(self):
        config = {"needs_attention_pct": 50.0, "over_capacity_pct": 70.0}
        assert classify_utilization(60.0, config) == "needs_attention"
        assert classify_utilization(71.0, config) == "over_capacity"


class TestCustomerRollup:
    def test_sums_active_links(self):
        racks = {"R1": make_rack("R1", 100, 50), "R2": make_rack("R2", 40, 10)}
        links = [make_link("A1", "R1"), make_link("A2", "R2", order=2)]
        rollup = compute_customer_rollup(make_customer(), links, racks)

        assert rollup.total_capacity == 140
        assert rollup.total_used == 60
        assert rollup.overall_utilization == pytest.approx(42.857, rel=1e-3)
        assert rollup.status == "active"
        assert rollup.assignment_count == 2

    def test_inactive_links_ignored(self):
        racks = {"R1": make_rack("R1", 100, 50), "R2": make_rack("R2", 100, 100)}
        links = [make_link("A1", "R1"), make_link("A2", "R2", order=2, active=False)]
        rollup = compute_customer_rollup(make_customer(), links, racks)
        assert rollup.total_capacity == 100
        assert rollup.assignment_count == 1

    def test_no_links_is_zero_and_active(self):
        rollup = compute_customer_rollup(make_customer(), [], {})
        assert rollup.overall_utilization == 0.0
        assert rollup.status == "active"

    def test_missing_rack_skipped(self):
        links = [make_link("A1", "gone")]
        rollup = compute_customer_rollup(make_customer(), links, {})
        assert rollup.total_capacity == 0
        assert rollup.assignment_count == 1

    def test_explanation_mentions_threshold(self):
        racks = {"R1": make_rack("R1", 100, 97)}
        rollup = compute_customer_rollup(make_customer(), [make_link("A1", "R1")], racks)
        steps = explain_customer_rollup(rollup)
        assert rollup.status == "over_capacity"
        assert "95%" in steps[-1]


class TestPortfolio:
    def test_summary_counts(self):
        customers = [make_customer("C1", "Acme"), make_customer("C2", "Beta")]
        racks = {"R1": make_rack("R1", 100, 90), "R2": make_rack("R2", 100, 10)}
        links = [make_link("A1", "R1"), make_link("A2", "R2", customer="C2", kind="shared")]
        rollups = compute_all_rollups(customers, links, racks)
        summary = summarize_portfolio(rollups, links)

        assert summary["customer_count"] == 2
        assert summary["total_capacity"] == 200
        assert summary["overall_utilization"] == pytest.approx(50.0)
        assert summary["status_counts"]["needs_attention"] == 1
        assert summary["kind_counts"]["shared"] == 1

    def test_alerts_ordered_by_utilization(self):
        customers = [make_customer("C1", "Acme"), make_customer("C2", "Beta"), make_customer("C3", "Gamma")]
        racks = {
            "R1": make_rack("R1", 100, 88),
            "R2": make_rack("R2", 100, 99),
            "R3": make_rack("R3", 100, 5),
        }
        links = [
            make_link("A1", "R1"),
            make_link("A2", "R2", customer="C2"),
            make_link("A3", "R3", customer="C3"),
        ]
        alerts = compute_utilization_alerts(compute_all_rollups(customers, links, racks))

        assert [a["customer_name"] for a in alerts] == ["Beta", "Acme", "Gamma"]
        assert [a["level"] for a in alerts] == ["error", "warning", "info"]


class TestRackUtilization:
    def test_bands(self):
        assert capacity_band(96, 100) == "critical"
        assert capacity_band(85, 100) == "high"
        assert capacity_band(10, 100) == "normal"
        assert capacity_band(5, 0) == "normal"

    def test_rows_list_linked_customers(self):
        racks = [make_rack("R1", 100, 50), make_rack("R2", 100, 0)]
        links = [make_link("A1", "R1"), make_link("A2", "R1", customer="C2")]
        rows = get_rack_utilization(racks, links, {"C1": "Acme", "C2": "Beta"})

        assert rows[0]["customers"] == ["Acme", "Beta"]
        assert rows[0]["utilization_pct"] == 50.0
        assert rows[1]["customers"] == []
