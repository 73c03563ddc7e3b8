"""
pytest plugin providing a per-test double factory.

Usage:
    def test_notifies_observer(doubles):
        observer = doubles.create_mock(Observer)
        configure(observer, "update").expects(once()).with_args("something")

        subject = Subject()
        subject.attach(observer)
        subject.do_something()

Expectations of every mock created through `doubles` are verified when
the test body finishes; a failing expectation fails the test.
"""

from typing import Generator

import pytest

from stunt.core.config import get_settings
from stunt.factory import DoubleFactory


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "no_verify: do not verify expectations of the doubles fixture"
    )


@pytest.fixture
def doubles() -> Generator[DoubleFactory, None, None]:
    """Double factory scoped to one test"""
    yield DoubleFactory(settings=get_settings())


@pytest.hookimpl(wrapper=True)
def pytest_runtest_call(item):
    result = yield
    factory = getattr(item, "funcargs", {}).get("doubles")
    if (
        isinstance(factory, DoubleFactory)
        and factory.settings.auto_verify
        and item.get_closest_marker("no_verify") is None
    ):
        failing = [r for r in factory.verify_all() if not r.passed]
        if failing:
            pytest.fail("\n\n".join(r.format_text() for r in failing), pytrace=False)
    return result
