"""Test helpers for netalloc unit tests."""

from __future__ import annotations

from .builders import make_container, make_process, read_json
from .mocks import FailingLiveState, FakeLiveState

TEST_HOST_IP = "10.0.5.7"
"""Host IPv4 used to derive address pools in tests."""

__all__ = [
    "FailingLiveState",
    "FakeLiveState",
    "TEST_HOST_IP",
    "make_container",
    "make_process",
    "read_json",
]
