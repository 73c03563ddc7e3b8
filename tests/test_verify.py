"""
Tests for expectation verification
"""

import json

import pytest

from stunt import (
    DoubleMode, ExpectationFailedError, Settings, anything, at_least, at_least_once,
    at_most, attach_expectation, configure, configure_settings, create_mock,
    create_stub, equal_to, exactly, greater_than, is_instance_of, never, once,
    any_number, verify, verify_all,
)
from tests.contracts import Observer, Subject


def test_update_called_once_with_something():
    """Test the observer notification example"""
    observer = create_mock(Observer)
    configure(observer, "update").expects(once()).with_args(equal_to("something"))

    subject = Subject("My subject")
    subject.attach(observer)
    subject.do_something()

    report = verify(observer)
    assert report.passed
    assert report.entry("update").actual_count == 1


def test_update_called_twice_fails_with_actual_count():
    """Test that an extra call fails an exactly-once expectation"""
    observer = create_mock(Observer)
    configure(observer, "update").expects(exactly(1)).with_args(equal_to("something"))

    subject = Subject("My subject")
    subject.attach(observer)
    subject.do_something()
    subject.do_something()

    report = verify(observer)
    assert not report.passed
    entry = report.entry("update")
    assert not entry.passed
    assert entry.actual_count == 2


@pytest.mark.parametrize("n", [0, 1, 2])
def test_exactly_n(n):
    """Test exactly(n) against n - 1, n and n + 1 calls"""
    for calls in (n - 1, n, n + 1):
        if calls < 0:
            continue
        mock = create_mock(Observer)
        configure(mock, "update").expects(exactly(n))
        for _ in range(calls):
            mock.update("x")
        assert verify(mock).passed is (calls == n)


@pytest.mark.parametrize("matcher, calls, passed", [
    (any_number(), 0, True),
    (any_number(), 5, True),
    (never(), 0, True),
    (never(), 1, False),
    (at_least_once(), 0, False),
    (at_least_once(), 3, True),
    (at_most(2), 2, True),
    (at_most(2), 3, False),
    (at_least(2), 1, False),
    (at_least(2), 2, True),
])
def test_count_matchers(matcher, calls, passed):
    """Test every invocation-count matcher"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(matcher)
    for _ in range(calls):
        mock.update("x")
    assert verify(mock).passed is passed


def test_only_matching_calls_are_counted():
    """Test that calls rejected by a constraint do not count"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(once()).with_args("wanted")
    mock.update("other")
    mock.update("wanted")
    mock.update("another")

    entry = verify(mock).entry("update")
    assert entry.passed
    assert entry.actual_count == 1
    assert entry.total_calls == 3
    assert [c.arguments for c in entry.mismatched_calls] == [("other",), ("another",)]


def test_constraints_are_anded_positionally():
    """Test several argument constraints on one call"""
    observer = create_mock(Observer)
    configure(observer, "report_error").expects(once()).with_args(
        greater_than(0), "Something bad happened", is_instance_of(Subject),
    )
    subject = Subject("My subject")
    subject.attach(observer)
    subject.do_something_bad()
    assert verify(observer).passed


def test_extra_arguments_pass_by_default():
    """Test that arguments beyond the constraint list are not checked"""
    mock = create_mock(Observer)
    configure(mock, "report_error").expects(once()).with_args(42)
    mock.report_error(42, "anything", None)
    assert verify(mock).passed


def test_attach_expectation_replaces_previous_one():
    """Test that the last attached expectation wins"""
    mock = create_mock(Observer)
    attach_expectation(mock, "update", never())
    attach_expectation(mock, "update", once(), ["x"])
    mock.update("x")
    report = verify(mock)
    assert report.passed
    assert report.total == 1


def test_attach_expectation_takes_a_lone_string_as_one_constraint():
    """Test that a string constraint is not split into characters"""
    mock = create_mock(Observer)
    attach_expectation(mock, "update", once(), "something")
    mock.update("something")
    report = verify(mock)
    assert report.passed
    assert len(report.entries[0].expectation.constraints) == 1


def test_verify_reports_all_failures():
    """Test that one failure does not stop other checks"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(once())
    configure(mock, "report_error").expects(once())
    report = verify(mock)
    assert [e.operation for e in report.failures] == ["update", "report_error"]


def test_verify_is_idempotent():
    """Test that verifying twice without new calls gives equal reports"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(exactly(2)).with_args(anything())
    mock.update("a")
    first = verify(mock)
    second = verify(mock)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_verify_does_not_raise():
    """Test that failures are data until explicitly raised"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(once())
    report = verify(mock)
    with pytest.raises(ExpectationFailedError, match="update"):
        report.raise_for_failures()


def test_operations_without_expectations_are_not_reported():
    """Test that plain stubbing leaves no report entries"""
    mock = create_mock(Observer)
    configure(mock, "update").will_return(None)
    mock.update("x")
    assert verify(mock).entries == ()


def test_stub_expectations_are_skipped_by_default(caplog):
    """Test that stubs are not verified unless configured"""
    stub = create_stub(Observer)
    configure(stub, "update").expects(once())
    assert "not verified" in caplog.text
    report = verify(stub)
    assert report.passed
    assert report.mode is DoubleMode.STUB
    assert report.entries == ()


def test_stub_expectations_can_be_enabled():
    """Test verifying stubs through settings"""
    stub = create_stub(Observer)
    configure(stub, "update").expects(once())
    assert not verify(stub, Settings(verify_stub_expectations=True)).passed

    configure_settings(verify_stub_expectations=True)
    assert not verify(stub).passed


def test_mismatch_samples_are_capped():
    """Test the number of rejected calls kept in a report entry"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(never()).with_args("never sent")
    for i in range(10):
        mock.update(str(i))
    entry = verify(mock, Settings(max_mismatch_samples=2)).entry("update")
    assert entry.passed
    assert len(entry.mismatched_calls) == 2


def test_report_rendering():
    """Test text and JSON forms of a report"""
    mock = create_mock(Observer)
    configure(mock, "update").expects(once()).with_args("something")
    mock.update("else")
    report = verify(mock)

    text = report.format_text()
    assert "0/1 passed" in text
    assert "FAIL update" in text
    assert "'else'" in text

    data = json.loads(report.to_json_string())
    assert data["double"] == "Observer"
    assert data["passed"] is False
    assert data["entries"][0]["actual_count"] == 0
    assert data["entries"][0]["expectation"] == "called exactly once with (is equal to 'something')"


def test_verify_all():
    """Test verifying several doubles at once"""
    first = create_mock(Observer)
    second = create_mock(Observer)
    configure(second, "update").expects(once())
    reports = verify_all([first, second])
    assert [r.passed for r in reports] == [True, False]
