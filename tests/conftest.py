"""Pytest configuration and shared fixtures."""

import pytest

from gql_e2e.config import RunConfig
from tests.fakes import FakeContext, FakeEnvironment, config_for


@pytest.fixture
def fake_context() -> FakeContext:
    return FakeContext()


@pytest.fixture
def fake_env(fake_context) -> FakeEnvironment:
    return FakeEnvironment(fake_context)


@pytest.fixture
def run_config(fake_env) -> RunConfig:
    return config_for(fake_env)
