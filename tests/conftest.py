"""Shared pytest fixtures for all tests."""

pytest_plugins = ["agentbroker.testing.conftest"]
