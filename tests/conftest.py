"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import grpc
import pytest


@pytest.fixture
def mock_channel() -> Mock:
    """A mock gRPC channel; stubs built on it are replaced per test."""
    return Mock(spec=grpc.Channel)
