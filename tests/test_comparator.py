"""Tests for baseline resolution and the pass/fail decision."""

from unittest.mock import MagicMock

import pytest

from coverage_ledger.comparator import Comparator
from coverage_ledger.exceptions import DegenerateMetricError


@pytest.fixture
def comparator(ledger):
    return Comparator(ledger)


def _seed_master(ledger, make_counts, covered=20):
    return ledger.append("P", "master", "T", "master", make_counts(covered, 20))


class TestNoBaseline:
    def test_accepts_by_default(self, comparator, make_counts):
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(19, 20))
        assert verdict.accepted
        assert verdict.message == "95% >= 0"
        assert verdict.baseline is None
        assert verdict.fallback_branch is None

    def test_accepts_when_neither_branch_has_history(self, comparator, make_counts):
        verdict = comparator.evaluate("P", "feature", "T", "master", make_counts(18, 12705))
        assert verdict.accepted
        assert verdict.message == "0.14% >= 0"


class TestSameBranch:
    def test_lower_coverage_rejected(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts)
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(19, 20))

        assert not verdict.accepted
        assert verdict.message == (
            "New coverage (95%) needs to equal or exceed current coverage (100%)."
        )
        assert verdict.new_percent == 95.0
        assert verdict.baseline_percent == 100.0

    def test_tiny_coverage_rejected(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts)
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(18, 12705))
        assert verdict.message == (
            "New coverage (0.14%) needs to equal or exceed current coverage (100%)."
        )

    def test_equal_coverage_accepted(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts)
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(20, 20))
        assert verdict.accepted
        assert verdict.message == "100% >= 100%"

    def test_higher_coverage_accepted(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts, covered=19)
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(20, 20))
        assert verdict.accepted
        assert verdict.message == "100% >= 95%"

    def test_equal_after_rounding_accepted(self, ledger, comparator, make_counts):
        # 1/3 and 3333/10000 differ as ratios but both round to 33.33%
        ledger.append("P", "master", "T", "master", make_counts(1, 3))
        new = make_counts(3333, 10000)
        verdict = comparator.evaluate("P", "master", "T", "master", new)
        assert verdict.accepted
        assert verdict.message == "33.33% >= 33.33%"

    def test_exact_half_matches_rounded_baseline(self, ledger, comparator, make_counts):
        # 69/480 is exactly 14.375%, which rounds up to the stored 14.38%
        ledger.append("P", "master", "T", "master", make_counts(1438, 10000))
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(69, 480))
        assert verdict.accepted
        assert verdict.message == "14.38% >= 14.38%"

    def test_compares_against_latest_snapshot(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts, covered=20)
        _seed_master(ledger, make_counts, covered=10)
        verdict = comparator.evaluate("P", "master", "T", "master", make_counts(15, 20))
        assert verdict.accepted
        assert verdict.message == "75% >= 50%"

    def test_no_fallback_when_branch_equals_base(self, make_counts):
        ledger = MagicMock()
        ledger.latest.return_value = None

        Comparator(ledger).evaluate("P", "master", "T", "master", make_counts(10, 20))

        ledger.latest.assert_called_once_with("P", "master", "T")


class TestBaseBranchFallback:
    def test_falls_back_to_base_branch(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts)
        verdict = comparator.evaluate("P", "feature", "T", "master", make_counts(18, 12705))

        assert not verdict.accepted
        assert verdict.message == (
            "Branch not found, trying base branch master\n"
            "New coverage (0.14%) needs to equal or exceed current coverage (100%)."
        )
        assert verdict.fallback_branch == "master"
        assert verdict.baseline.branch == "master"

    def test_fallback_pass_is_annotated(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts, covered=19)
        verdict = comparator.evaluate("P", "feature", "T", "master", make_counts(20, 20))
        assert verdict.accepted
        assert verdict.message == "Branch not found, trying base branch master\n100% >= 95%"

    def test_own_branch_history_wins(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts, covered=20)
        ledger.append("P", "feature", "T", "master", make_counts(10, 20))

        verdict = comparator.evaluate("P", "feature", "T", "master", make_counts(12, 20))

        assert verdict.accepted
        assert verdict.fallback_branch is None
        assert verdict.message == "60% >= 50%"

    def test_fallback_only_after_exact_lookup_misses(self, make_counts):
        ledger = MagicMock()
        ledger.latest.return_value = None

        Comparator(ledger).evaluate("P", "feature", "T", "master", make_counts(10, 20))

        assert [c.args for c in ledger.latest.call_args_list] == [
            ("P", "feature", "T"),
            ("P", "master", "T"),
        ]


class TestPurity:
    def test_evaluate_does_not_write(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts)
        comparator.evaluate("P", "feature", "T", "master", make_counts(18, 20))
        assert ledger.all_for_key("P", "feature", "T") == []
        assert len(ledger.all_for_key("P", "master", "T")) == 1

    def test_repeated_evaluation_is_identical(self, ledger, comparator, make_counts):
        _seed_master(ledger, make_counts, covered=19)
        first = comparator.evaluate("P", "feature", "T", "master", make_counts(17, 20))
        second = comparator.evaluate("P", "feature", "T", "master", make_counts(17, 20))
        assert first == second

    def test_zero_total_raises(self, comparator, make_counts):
        with pytest.raises(DegenerateMetricError):
            comparator.evaluate("P", "master", "T", "master", make_counts(0, 0))
