"""Tests for submission parsing and validation."""

import pytest

from coverage_ledger.exceptions import DegenerateMetricError, ValidationError
from coverage_ledger.validation import MISSING_MESSAGE, REQUIRED_PARAMS, parse_submission

FULL = {
    "coveredConditionals": 20,
    "coveredStatements": 20,
    "coveredMethods": 20,
    "conditionals": 20,
    "statements": 20,
    "methods": 20,
    "baseBranch": "master",
}


class TestRequiredFields:
    def test_fixed_order(self):
        assert REQUIRED_PARAMS == (
            "coveredConditionals",
            "coveredStatements",
            "coveredMethods",
            "conditionals",
            "statements",
            "methods",
            "baseBranch",
        )

    def test_message_lists_all_seven(self):
        assert MISSING_MESSAGE == (
            "Missing required parameters: coveredConditionals, coveredStatements, "
            "coveredMethods, conditionals, statements, methods, baseBranch"
        )

    @pytest.mark.parametrize("absent", REQUIRED_PARAMS)
    def test_any_single_missing_field(self, absent):
        params = {k: v for k, v in FULL.items() if k != absent}
        with pytest.raises(ValidationError) as exc_info:
            parse_submission(params)
        assert exc_info.value.message == MISSING_MESSAGE
        assert exc_info.value.missing == [absent]

    def test_reports_every_missing_field(self):
        params = {
            "coveredConditionals": "18",
            "statements": "12705",
            "methods": "12705",
            "baseBranch": "master",
        }
        with pytest.raises(ValidationError) as exc_info:
            parse_submission(params)
        assert exc_info.value.missing == ["coveredStatements", "coveredMethods", "conditionals"]

    def test_blank_string_counts_as_missing(self):
        params = dict(FULL, baseBranch="  ")
        with pytest.raises(ValidationError) as exc_info:
            parse_submission(params)
        assert exc_info.value.missing == ["baseBranch"]


class TestCounts:
    def test_parses_query_strings(self):
        params = {k: str(v) for k, v in FULL.items()}
        submission = parse_submission(params)
        assert submission.counts.statements == 20
        assert submission.counts.covered_methods == 20
        assert submission.base_branch == "master"
        assert submission.ref is None

    def test_zero_counts_are_present(self):
        submission = parse_submission(dict(FULL, coveredConditionals=0))
        assert submission.counts.covered_conditionals == 0

    def test_integral_floats_accepted(self):
        submission = parse_submission(dict(FULL, statements=20.0))
        assert submission.counts.statements == 20

    @pytest.mark.parametrize("bad", ["abc", "1.5", -1, "-3", 2.5, True, [1]])
    def test_malformed_count_rejected(self, bad):
        with pytest.raises(ValidationError) as exc_info:
            parse_submission(dict(FULL, methods=bad))
        assert "methods" in exc_info.value.invalid
        assert exc_info.value.missing == []

    def test_collects_all_invalid_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_submission(dict(FULL, methods="x", statements="y"))
        assert set(exc_info.value.invalid) == {"methods", "statements"}

    def test_zero_total_rejected(self):
        params = dict(FULL, statements=0, conditionals=0, methods=0)
        with pytest.raises(DegenerateMetricError):
            parse_submission(params)

    def test_covered_above_total_is_permitted(self):
        submission = parse_submission(dict(FULL, coveredStatements=40))
        assert submission.counts.coverage_percent == pytest.approx(133.33)


class TestRef:
    def test_optional_ref(self):
        assert parse_submission(dict(FULL, ref="deadbeef")).ref == "deadbeef"

    def test_blank_ref_is_none(self):
        assert parse_submission(dict(FULL, ref="")).ref is None

    def test_non_string_ref_is_stringified(self):
        assert parse_submission(dict(FULL, ref=1234)).ref == "1234"

    def test_non_string_base_branch_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_submission(dict(FULL, baseBranch=5))
        assert "baseBranch" in exc_info.value.invalid
