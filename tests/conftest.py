"""
Global test configuration.
"""

import logging
import os

import pytest


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_grocer_env(request, monkeypatch):
    """Ensure a clean GROCER_* environment for each test.

    - Removes all GROCER_* variables and debug toggles before each test
    - Leaves other variables intact for stability

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GROCER_"):
            monkeypatch.delenv(key, raising=False)
    # Avoid DEBUG toggles switching telemetry on
    monkeypatch.delenv("DEBUG", raising=False)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Client, transport and coordinator wired together over a mock HTTP backend",
        "allow_env_pollution: Keep GROCER_* variables from the real environment",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)
