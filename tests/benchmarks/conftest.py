"""conftest.py for benchmarks.

The dispatcher owns asyncio primitives, so async benchmarks share one
session-scoped loop instead of paying ``asyncio.run`` per round.
"""

from __future__ import annotations

import asyncio

import pytest


@pytest.fixture(scope="session")
def event_loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture(scope="session")
def run_async(event_loop):
    """Run a coroutine to completion on the shared loop.

    Pass a fresh coroutine per round::

        benchmark(lambda: run_async(make_coroutine()))
    """

    def _run(coro):
        return event_loop.run_until_complete(coro)

    return _run
