"""Pytest configuration and shared fixtures."""

import os

from hypothesis import settings

if "NETALLOC_ENV" not in os.environ:
    os.environ["NETALLOC_ENV"] = "test"

# Create a profile named "no_deadline" with deadline disabled.
#
# Every example touches the file system, so timings vary widely.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
