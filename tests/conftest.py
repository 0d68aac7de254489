"""Shared fixtures for fluentspec tests."""

import os

import pytest


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "smoke: mark test as smoke test (fast, critical path - included in CI)"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end scenario"
    )


# Set test environment variables before importing modules
os.environ.setdefault("FLUENTSPEC_LOG_LEVEL", "DEBUG")
os.environ.setdefault("FLUENTSPEC_STOP_ON_FAILURE", "false")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("FLUENTSPEC_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FLUENTSPEC_LOG_JSON", "false")
    monkeypatch.setenv("FLUENTSPEC_STOP_ON_FAILURE", "false")
    monkeypatch.delenv("FLUENTSPEC_SETUP_ERROR_LABEL", raising=False)
    monkeypatch.delenv("FLUENTSPEC_MISSING_EXAMPLES_LABEL", raising=False)


@pytest.fixture
def expander(mock_env_vars):
    """A CaseExpander using default settings."""
    from fluentspec.compiler.expander import CaseExpander

    return CaseExpander()


@pytest.fixture
def executor(mock_env_vars):
    """A CaseExecutor that never stops early."""
    from fluentspec.compiler.executor import CaseExecutor

    return CaseExecutor(stop_on_failure=False)


@pytest.fixture
def run_case(executor):
    """Execute a single case and return its CaseResult."""

    def _run(case):
        return executor.execute(case)

    return _run
