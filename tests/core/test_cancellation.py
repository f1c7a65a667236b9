"""Tests for cooperative cancellation."""

import asyncio
import logging

import pytest

from crudflow import CancellationSource, OperationCancelledError


def test_token_starts_clear():
    source = CancellationSource()

    assert not source.cancelled
    assert not source.token.cancelled
    source.token.raise_if_cancelled()


def test_cancel_fires_token_once():
    source = CancellationSource()
    calls = []
    source.token.register(lambda: calls.append(1))

    source.cancel()
    source.cancel()

    assert source.cancelled
    assert source.token.cancelled
    assert calls == [1]
    with pytest.raises(OperationCancelledError):
        source.token.raise_if_cancelled()


def test_token_created_after_cancel_is_cancelled():
    source = CancellationSource()
    source.cancel()

    assert source.token.cancelled


def test_register_after_cancel_runs_immediately():
    source = CancellationSource()
    source.cancel()
    calls = []

    source.token.register(lambda: calls.append(1))

    assert calls == [1]


def test_unregistered_callback_does_not_run():
    source = CancellationSource()
    calls = []
    unregister = source.token.register(lambda: calls.append(1))

    unregister()
    unregister()
    source.cancel()

    assert calls == []


def test_failing_callback_is_logged(caplog):
    source = CancellationSource()
    calls = []

    def broken():
        raise RuntimeError("boom")

    source.token.register(broken)
    source.token.register(lambda: calls.append(1))

    with caplog.at_level(logging.ERROR, logger="crudflow.core.cancellation"):
        source.cancel()

    assert calls == [1]
    assert "failed" in caplog.text


@pytest.mark.asyncio
async def test_wait_resumes_on_cancel():
    source = CancellationSource()
    waiter = asyncio.create_task(source.token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    source.cancel()
    await asyncio.wait_for(waiter, timeout=1)


@pytest.mark.asyncio
async def test_wait_returns_when_already_cancelled():
    source = CancellationSource()
    source.cancel()

    await asyncio.wait_for(source.token.wait(), timeout=1)
