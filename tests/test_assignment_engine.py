"""Tests for the first-fit assignment engine."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.assignment import Assignment
from models.rack import Rack
from models.rule import AssignmentRule
from engine.assignment_engine import (
    compute_utilization_pct,
    rank_candidates,
    evaluate_assignment,
    candidate_rows,
)
from engine.errors import UnknownRackError
from config.defaults import (
    FAILURE_NO_ASSIGNMENTS, FAILURE_ALL_AT_CAPACITY,
    NO_ASSIGNMENTS_MESSAGE, ALL_AT_CAPACITY_MESSAGE, ALL_AT_CAPACITY_ACTION,
)


def make_rack(rack_id="R1", capacity=100, count=0):
    return Rack(rack_id, rack_id, "WH1", "A", "S1", capacity, count)


def make_assignment(asg_id="A1", customer="C1", rack_id="R1", order=1, threshold=90.0,
                    types=None, active=True, rule_id=None):
    return Assignment(asg_id, customer, rack_id, "dedicated", order, threshold,
                      document_types=types or [], is_active=active, source_rule_id=rule_id)


def rack_map(*racks):
    return {r.rack_id: r for r in racks}


class TestComputeUtilization:
    def test_regular_rack(self):
        pct, zero = compute_utilization_pct(make_rack(capacity=200, count=50))
        assert pct == 25.0
        assert zero is False

    def test_zero_capacity_is_saturated_by_default(self):
        pct, zero = compute_utilization_pct(make_rack(capacity=0, count=0))
        assert pct == 100.0
        assert zero is True

    def test_zero_capacity_configurable(self):
        pct, _ = compute_utilization_pct(make_rack(capacity=0), {"zero_capacity_utilization_pct": 0.0})
        assert pct == 0.0


class TestRankCandidates:
    def test_sorted_by_priority_order(self):
        assignments = [
            make_assignment("A3", order=3),
            make_assignment("A1", order=1),
            make_assignment("A2", order=2),
        ]
        ranked = rank_candidates("C1", "invoice", assignments)
        assert [a.assignment_id for a in ranked] == ["A1", "A2", "A3"]

    def test_inactive_and_other_customers_excluded(self):
        assignments = [
            make_assignment("A1", order=1, active=False),
            make_assignment("A2", customer="C2", order=1),
            make_assignment("A3", order=2),
        ]
        assert [a.assignment_id for a in rank_candidates("C1", "invoice", assignments)] == ["A3"]

    def test_document_type_filter(self):
        assignments = [
            make_assignment("A1", order=1, types=["contract"]),
            make_assignment("A2", order=2, types=["invoice", "receipt"]),
            make_assignment("A3", order=3),
        ]
        ranked = rank_candidates("C1", "invoice", assignments)
        assert [a.assignment_id for a in ranked] == ["A2", "A3"]

    def test_ties_broken_by_assignment_id(self):
        assignments = [make_assignment("B", order=1), make_assignment("A", order=1)]
        assert [a.assignment_id for a in rank_candidates("C1", "x", assignments)] == ["A", "B"]

    def test_rule_size_bounds_apply_to_rule_links_only(self):
        rule = AssignmentRule("rule-1", "Small files", file_size_min=0, file_size_max=1000)
        assignments = [
            make_assignment("A1", order=1, rule_id="rule-1"),
            make_assignment("A2", order=2),
        ]
        ranked = rank_candidates("C1", "x", assignments, file_size=5000, rule_map={"rule-1": rule})
        assert [a.assignment_id for a in ranked] == ["A2"]

        ranked = rank_candidates("C1", "x", assignments, file_size=1000, rule_map={"rule-1": rule})
        assert [a.assignment_id for a in ranked] == ["A1", "A2"]


class TestEvaluateAssignment:
    def test_skips_rack_at_threshold(self):
        """R1 at 90% of a 90% threshold is skipped, R2 at 20% is chosen."""
        racks = rack_map(make_rack("R1", 100, 90), make_rack("R2", 50, 10))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1, threshold=90.0),
            make_assignment("A2", rack_id="R2", order=2, threshold=90.0),
        ]
        decision = evaluate_assignment("C1", "invoice", 1024, assignments, racks)

        assert decision.success
        assert decision.assigned_rack.rack_id == "R2"
        assert decision.message == "Document will be assigned to R2"
        assert decision.assigned_rack.utilization_pct == pytest.approx(20.0)
        assert decision.assigned_rack.utilization_after_pct == pytest.approx(22.0)
        assert decision.assignment.assignment_id == "A2"

    def test_rack_exactly_at_threshold_not_chosen(self):
        racks = rack_map(make_rack("R1", 10, 9), make_rack("R2", 10, 2))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1, threshold=90.0),
            make_assignment("A2", rack_id="R2", order=2, threshold=90.0),
        ]
        decision = evaluate_assignment("C1", "contract", 5000, assignments, racks)
        assert decision.success
        assert decision.assigned_rack.rack_id == "R2"
        assert decision.assigned_rack.path == "WH1 > A > S1 > R2"

    def test_first_fit_not_best_fit(self):
        """Order 1 is chosen even though order 2 is emptier."""
        racks = rack_map(make_rack("R1", 100, 80), make_rack("R2", 100, 0))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1),
            make_assignment("A2", rack_id="R2", order=2),
        ]
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        assert decision.assigned_rack.rack_id == "R1"

    def test_only_middle_rack_qualifies(self):
        racks = rack_map(make_rack("R1", 100, 95), make_rack("R2", 100, 50), make_rack("R3", 100, 10))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1),
            make_assignment("A3", rack_id="R3", order=3, threshold=5.0),
            make_assignment("A2", rack_id="R2", order=2),
        ]
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        assert decision.assigned_rack.rack_id == "R2"

    def test_all_at_capacity(self):
        racks = rack_map(make_rack("R1", 100, 90), make_rack("R2", 100, 100))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1),
            make_assignment("A2", rack_id="R2", order=2),
        ]
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)

        assert not decision.success
        assert decision.failure_kind == FAILURE_ALL_AT_CAPACITY
        assert decision.message == ALL_AT_CAPACITY_MESSAGE
        assert decision.suggested_action == ALL_AT_CAPACITY_ACTION
        assert decision.assigned_rack is None

    def test_no_assignments(self):
        decision = evaluate_assignment("C1", "invoice", 1, [], {})
        assert not decision.success
        assert decision.failure_kind == FAILURE_NO_ASSIGNMENTS
        assert decision.message == NO_ASSIGNMENTS_MESSAGE
        assert decision.suggested_action is None

    def test_type_mismatch_is_no_assignments(self):
        racks = rack_map(make_rack("R1"))
        assignments = [make_assignment("A1", types=["contract"])]
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        assert decision.failure_kind == FAILURE_NO_ASSIGNMENTS

    def test_zero_capacity_rack_skipped(self):
        racks = rack_map(make_rack("R1", 0, 0), make_rack("R2", 10, 0))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1, threshold=100.0),
            make_assignment("A2", rack_id="R2", order=2),
        ]
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        assert decision.assigned_rack.rack_id == "R2"

    def test_unknown_rack_raises(self):
        assignments = [make_assignment("A1", rack_id="missing")]
        with pytest.raises(UnknownRackError) as exc:
            evaluate_assignment("C1", "invoice", 1, assignments, {})
        assert exc.value.to_dict()["details"]["rack_id"] == "missing"

    def test_evaluation_is_idempotent(self):
        racks = rack_map(make_rack("R1", 100, 40))
        assignments = [make_assignment("A1")]
        first = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        second = evaluate_assignment("C1", "invoice", 1, assignments, racks)

        assert first.assigned_rack == second.assigned_rack
        assert racks["R1"].current_count == 40

    def test_explanation_steps_recorded(self):
        racks = rack_map(make_rack("R1", 100, 95), make_rack("R2", 100, 0))
        assignments = [
            make_assignment("A1", rack_id="R1", order=1),
            make_assignment("A2", rack_id="R2", order=2),
        ]
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        # filter, skip R1, choose R2
        assert len(decision.explanation_steps) == 3


class TestCandidateRows:
    def test_rows_follow_scan_order(self):
        racks = rack_map(make_rack("R1", 100, 95), make_rack("R2", 100, 0))
        assignments = [
            make_assignment("A2", rack_id="R2", order=2),
            make_assignment("A1", rack_id="R1", order=1),
        ]
        rows = candidate_rows("C1", "invoice", assignments, racks)
        assert [r["rack_code"] for r in rows] == ["R1", "R2"]
        assert [r["available"] for r in rows] == [False, True]
