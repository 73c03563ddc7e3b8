"""
Shared fixtures for stunt tests
"""

import pytest

from stunt.core.config import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings"""
    for name in ("VERIFY_STUB_EXPECTATIONS", "MAX_MISMATCH_SAMPLES", "AUTO_VERIFY"):
        monkeypatch.delenv("STUNT_" + name, raising=False)
    reset_settings()
    yield
    reset_settings()
