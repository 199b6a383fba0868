"""Tests for committing documents into racks."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import gc
import threading

import pytest

from models.assignment import Assignment
from models.rack import Rack
from engine import placement
from engine.assignment_engine import evaluate_assignment
from engine.catalog import retire_assignment
from engine.placement import place_document
from engine.errors import RackSaturatedError, StaleAssignmentError, UnknownRackError


def make_setup(capacity=10, count=0, threshold=90.0):
    rack = Rack("R1", "R1", "WH1", "A", "S1", capacity, count)
    assignments = [Assignment("A1", "C1", "R1", "dedicated", 1, threshold)]
    return {"R1": rack}, assignments


class TestPlaceDocument:
    def test_increments_count(self):
        racks, assignments = make_setup(count=3)
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        rack = place_document(racks, assignments, decision)
        assert rack.current_count == 4

    def test_failed_decision_rejected(self):
        racks, _ = make_setup()
        decision = evaluate_assignment("C1", "invoice", 1, [], racks)
        with pytest.raises(ValueError):
            place_document(racks, [], decision)

    def test_stale_decision_raises_saturated(self):
        racks, assignments = make_setup(capacity=10, count=8, threshold=90.0)
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        place_document(racks, assignments, decision)  # 9/10 = 90%
        with pytest.raises(RackSaturatedError):
            place_document(racks, assignments, decision)
        assert racks["R1"].current_count == 9

    def test_marks_full(self):
        racks, assignments = make_setup(capacity=2, count=1, threshold=100.0)
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        rack = place_document(racks, assignments, decision)
        assert rack.status == "full"

    def test_rack_removed_after_decision(self):
        racks, assignments = make_setup()
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        with pytest.raises(UnknownRackError):
            place_document({}, assignments, decision)

    def test_zero_capacity_never_filled(self):
        """A config that reports zero-capacity racks as empty still cannot overfill them."""
        racks, assignments = make_setup(capacity=0, count=0, threshold=90.0)
        config = {"zero_capacity_utilization_pct": 0.0}
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks, rule_config=config)
        assert decision.success

        for _ in range(3):
            with pytest.raises(RackSaturatedError):
                place_document(racks, assignments, decision, config)
        assert racks["R1"].current_count == 0

    def test_count_never_exceeds_capacity_at_full_threshold(self):
        racks, assignments = make_setup(capacity=2, count=0, threshold=100.0)
        for _ in range(2):
            decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
            place_document(racks, assignments, decision)

        racks["R1"].capacity = 1  # shrunk by an operator after the last decision
        with pytest.raises(RackSaturatedError):
            place_document(racks, assignments, decision)
        assert racks["R1"].current_count == 2

    def test_retired_link_rejected(self):
        racks, assignments = make_setup(count=1)
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        assignments = retire_assignment(assignments, "A1")

        with pytest.raises(StaleAssignmentError):
            place_document(racks, assignments, decision)
        assert racks["R1"].current_count == 1

    def test_current_threshold_used(self):
        racks, assignments = make_setup(count=5, threshold=90.0)
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        assignments[0].capacity_threshold_pct = 50.0  # lowered since the decision

        with pytest.raises(RackSaturatedError):
            place_document(racks, assignments, decision)

    def test_locks_released_after_placement(self):
        racks, assignments = make_setup()
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        place_document(racks, assignments, decision)
        gc.collect()
        assert "R1" not in placement._rack_locks

    def test_concurrent_placements_respect_threshold(self):
        """Ten threads race for a rack with room for nine below threshold."""
        racks, assignments = make_setup(capacity=100, count=81, threshold=90.0)
        decision = evaluate_assignment("C1", "invoice", 1, assignments, racks)
        outcomes = []

        def worker():
            try:
                place_document(racks, assignments, decision)
                outcomes.append("ok")
            except RackSaturatedError:
                outcomes.append("saturated")

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 9
        assert racks["R1"].current_count == 90
