import threading
import time

import pytest

from pyda.core.da.client import TransportError, call_timeout
from pyda.core.da.context import Context


def test_background_never_done():
    ctx = Context.background()

    assert not ctx.done()
    assert ctx.remaining() is None
    assert ctx.error() == ""
    assert ctx.timeout(30.0) == 30.0


def test_cancel():
    ctx = Context.background()
    ctx.cancel()

    assert ctx.cancelled
    assert ctx.done()
    assert ctx.error() == "context cancelled"


def test_deadline_caps_timeout():
    ctx = Context.with_timeout(5.0)

    assert 0 < ctx.timeout(30.0) <= 5.0
    assert ctx.timeout(1.0) == 1.0


def test_expired_deadline():
    ctx = Context.with_timeout(0)

    assert ctx.done()
    assert ctx.error() == "context deadline exceeded"


def test_wait_wakes_on_cancel():
    ctx = Context.background()
    threading.Timer(0.05, ctx.cancel).start()

    started = time.monotonic()
    assert ctx.wait(10.0) is True
    assert time.monotonic() - started < 5.0


def test_wait_returns_false_when_live():
    ctx = Context.background()

    assert ctx.wait(0.01) is False


def test_call_timeout_rejects_spent_deadline():
    """Test that an exhausted deadline never becomes a zero timeout."""
    ctx = Context(deadline=time.monotonic() - 1.0)

    with pytest.raises(TransportError, match="context deadline exceeded"):
        call_timeout(ctx, 30.0)


def test_call_timeout_within_deadline():
    assert call_timeout(Context.background(), 12.0) == 12.0
    assert 0 < call_timeout(Context.with_timeout(5.0), 30.0) <= 5.0
