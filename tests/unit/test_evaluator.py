from __future__ import annotations

from ipacheck.domain.evaluator import evaluate
from ipacheck.domain.models import ERROR, ReplicationRecord, Server, Verdict

A = Server("ipa01.example.com")
B = Server("ipa02.example.com")
C = Server("ipa03.example.com")


def test_identical_counts_are_ok() -> None:
    assert evaluate({A: 42, B: 42, C: 42}) is Verdict.OK


def test_one_diverging_count_fails() -> None:
    assert evaluate({A: 42, B: 42, C: 41}) is Verdict.FAIL


def test_query_error_fails_even_when_others_agree() -> None:
    assert evaluate({A: 10, B: 10, C: ERROR}) is Verdict.FAIL


def test_all_errors_fail() -> None:
    assert evaluate({A: ERROR, B: ERROR, C: ERROR}) is Verdict.FAIL


def test_empty_mapping_fails() -> None:
    assert evaluate({}) is Verdict.FAIL


def test_absent_everywhere_is_consistent() -> None:
    assert evaluate({A: "", B: "", C: ""}) is Verdict.OK


def test_absent_on_one_server_fails() -> None:
    assert evaluate({A: "", B: 3, C: 3}) is Verdict.FAIL


def test_conflicts_absent_everywhere_ok() -> None:
    assert evaluate({A: "NO", B: "NO", C: "NO"}, reference_value="NO") is Verdict.OK


def test_conflicts_present_everywhere_fails() -> None:
    assert evaluate({A: "YES", B: "YES", C: "YES"}, reference_value="NO") is Verdict.FAIL


def test_reference_value_is_read_from_first_server() -> None:
    assert evaluate({A: "YES", B: "NO"}, reference_value="NO") is Verdict.FAIL


def test_single_server_is_ok() -> None:
    assert evaluate({A: 7}) is Verdict.OK


def test_record_tuples_compare_by_value() -> None:
    left = (ReplicationRecord("ipa02", "0"),)
    right = (ReplicationRecord("ipa02", "0"),)
    assert evaluate({A: left, B: right}) is Verdict.OK


def test_evaluation_is_idempotent() -> None:
    values = {A: 1, B: 2, C: 1}
    assert evaluate(values) is evaluate(values) is Verdict.FAIL
