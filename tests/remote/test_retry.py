import threading

import pytest

from metalctl.remote.context import OperationContext
from metalctl.remote.errors import (
    AuthenticationError,
    OperationCancelledError,
    OperationTimeoutError,
    RetriesExhaustedError,
    TransportError,
)
from metalctl.remote.retry import retry_operation


class Flaky:
    def __init__(self, failures, exc=TransportError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc("bmc busy")
        return "done"


def _run(fn, retries=2, delay=5.0, **kw):
    sleeps = []
    result = retry_operation(
        fn,
        ctx=OperationContext(),
        action="reboot_system",
        target="redfish+https://10.0.0.1/redfish/v1/Systems/1",
        retries=retries,
        delay=delay,
        sleep=sleeps.append,
        **kw,
    )
    return result, sleeps


def test_two_failures_then_success_pauses_twice():
    fn = Flaky(failures=2)
    result, sleeps = _run(fn, retries=2, delay=5.0)
    assert result == "done"
    assert fn.calls == 3
    assert sleeps == [5.0, 5.0]


def test_exhausted_retries_name_target_and_action():
    fn = Flaky(failures=10)
    with pytest.raises(RetriesExhaustedError) as exc:
        _run(fn, retries=2)
    assert fn.calls == 3
    assert exc.value.attempts == 3
    assert exc.value.action == "reboot_system"
    assert "10.0.0.1" in exc.value.target
    assert isinstance(exc.value.__cause__, TransportError)


def test_zero_retries_means_single_attempt():
    fn = Flaky(failures=1)
    with pytest.raises(RetriesExhaustedError):
        _run(fn, retries=0)
    assert fn.calls == 1


def test_non_transient_error_is_not_retried():
    fn = Flaky(failures=1, exc=AuthenticationError)
    with pytest.raises(AuthenticationError):
        _run(fn, retries=5)
    assert fn.calls == 1


def test_on_retry_callback_sees_each_failure():
    seen = []
    fn = Flaky(failures=2)
    _run(fn, retries=3, on_retry=lambda attempt, exc: seen.append(attempt))
    assert seen == [1, 2]


def test_cancelled_context_stops_before_next_attempt():
    ctx = OperationContext()
    fn = Flaky(failures=10)

    def cancel_on_sleep(delay):
        ctx.cancel()

    with pytest.raises(OperationCancelledError):
        retry_operation(fn, ctx=ctx, action="power_on", target="bmc", retries=5, delay=1, sleep=cancel_on_sleep)
    assert fn.calls == 1


def test_context_sleep_honors_deadline():
    ctx = OperationContext(timeout=0.05)
    with pytest.raises(OperationTimeoutError):
        ctx.sleep(10, "power_on")


def test_context_sleep_wakes_on_cancel():
    ctx = OperationContext()
    threading.Timer(0.05, ctx.cancel).start()
    with pytest.raises(OperationCancelledError):
        ctx.sleep(10, "power_on")


def test_context_without_timeout_is_unbounded():
    ctx = OperationContext.background()
    assert ctx.remaining() is None
    ctx.check()
    ctx.sleep(0)
