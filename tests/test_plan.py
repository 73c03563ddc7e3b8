"""
Tests for behavior plan configuration
"""

import pytest

from stunt import (
    ArgumentIndexOutOfRange, NoMappingForArguments, UnknownOperation,
    UnsupportedOperation, configure, create_stub, invocations, reset,
)
from tests.contracts import Observer, Service, SomeClass


def test_fixed_value():
    """Test that a single value is returned on every call"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return("foo")
    assert stub.do_something() == "foo"
    assert stub.do_something() == "foo"


def test_value_sequence_saturates_at_last_value():
    """Test that consecutive values are consumed in order and the last one sticks"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return(2, 3, 5, 7)
    results = [stub.do_something() for _ in range(6)]
    assert results == [2, 3, 5, 7, 7, 7]


def test_throw_exception_instance():
    """Test that the configured exception reaches the caller"""
    stub = create_stub(SomeClass)
    error = RuntimeError("boom")
    configure(stub, "do_something").will_throw(error)
    with pytest.raises(RuntimeError) as exc_info:
        stub.do_something()
    assert exc_info.value is error


def test_throw_exception_class():
    """Test that exception classes are accepted"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_throw(KeyError)
    with pytest.raises(KeyError):
        stub.do_something()


def test_throw_rejects_non_exceptions():
    """Test that only exceptions can be thrown"""
    stub = create_stub(SomeClass)
    with pytest.raises(TypeError):
        configure(stub, "do_something").will_throw("boom")


def test_return_argument():
    """Test that the chosen argument is returned unchanged"""
    stub = create_stub(SomeClass)
    marker = object()
    configure(stub, "do_something").will_return_argument(1)
    assert stub.do_something("foo", marker) is marker


def test_return_argument_out_of_range():
    """Test that echoing a missing argument fails"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return_argument(2)
    with pytest.raises(ArgumentIndexOutOfRange):
        stub.do_something("only", "two")


def test_return_argument_counts_applied_defaults():
    """Test that declared defaults take part in argument positions"""
    stub = create_stub(Service)
    configure(stub, "run").will_return_argument(1)
    assert stub.run("job") == 3
    assert stub.run("job", retries=9) == 9


def test_return_callback():
    """Test that the callback computes the return value from the arguments"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return_callback(lambda *args: "".join(args).upper())
    assert stub.do_something("a", "b") == "AB"


def test_return_callback_receives_extra_keywords():
    """Test that **kwargs parameters reach the callback as keywords"""
    stub = create_stub(Service)
    configure(stub, "log").will_return_callback(lambda *messages, **fields: (messages, fields))
    assert stub.log("a", "b", user="x") == (("a", "b"), {"user": "x"})


def test_return_self():
    """Test that the double itself is returned"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return_self()
    assert stub.do_something() is stub


def test_return_value_map():
    """Test that arguments select the return value"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return_map([
        (["a", "b", "c"], "d"),
        (["e", "f", "g"], "h"),
    ])
    assert stub.do_something("a", "b", "c") == "d"
    assert stub.do_something("e", "f", "g") == "h"
    with pytest.raises(NoMappingForArguments):
        stub.do_something("x", "y", "z")


def test_return_value_map_flat_rows():
    """Test rows whose last item is the return value"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return_map([
        ["a", "b", "c", "d"],
        ["a", "b", "c", "other"],
    ])
    assert stub.do_something("a", "b", "c") == "d"


def test_return_value_map_requires_exact_length():
    """Test that a prefix of the arguments does not match"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return_map([(("a",), "x")])
    with pytest.raises(NoMappingForArguments):
        stub.do_something("a", "b")


def test_reconfiguring_replaces_action():
    """Test that the last configured action wins"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_throw(ValueError).will_return("fine")
    assert stub.do_something() == "fine"


def test_unknown_operation_fails_at_configuration_time():
    """Test that misspelled operations are rejected immediately"""
    stub = create_stub(Observer)
    with pytest.raises(UnknownOperation, match="updat"):
        configure(stub, "updat")


def test_private_and_final_operations_cannot_be_configured():
    """Test that excluded operations are unknown to the plan"""
    stub = create_stub(Service)
    with pytest.raises(UnknownOperation):
        configure(stub, "version")
    with pytest.raises(UnknownOperation):
        configure(stub, "_helper")


def test_static_operations_cannot_be_configured():
    """Test that static stand-ins refuse configuration"""
    stub = create_stub(Service)
    with pytest.raises(UnsupportedOperation):
        configure(stub, "build").will_return(None)


def test_calls_must_fit_the_signature():
    """Test that a wrongly-called double raises like the real method"""
    stub = create_stub(Observer)
    with pytest.raises(TypeError):
        stub.update()
    with pytest.raises(TypeError):
        stub.update("a", "b")


def test_invocations_are_recorded_in_order():
    """Test the invocation log across operations"""
    stub = create_stub(Service)
    stub.run("a")
    stub.log("x", level="debug")
    stub.run("b", 1, urgent=True)

    calls = invocations(stub)
    assert [c.operation for c in calls] == ["run", "log", "run"]
    assert [c.order for c in calls] == [1, 2, 3]
    assert calls[0].arguments == ("a", 3, False)
    assert calls[1].arguments == ("x",)
    assert calls[1].kwargs == {"level": "debug"}
    assert calls[2].arguments == ("b", 1, True)
    assert len(invocations(stub, "run")) == 2


def test_reset_clears_invocations_but_keeps_behavior():
    """Test resetting the invocation log"""
    stub = create_stub(SomeClass)
    configure(stub, "do_something").will_return("kept")
    stub.do_something()
    reset(stub)
    assert invocations(stub) == []
    assert stub.do_something() == "kept"


def test_will_return_needs_a_value():
    """Test that an empty value list is rejected"""
    stub = create_stub(SomeClass)
    with pytest.raises(ValueError):
        configure(stub, "do_something").will_return()
