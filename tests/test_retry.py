import pytest

from wxbridge.backoff import BackoffConfig
from wxbridge.retry import RetryHandler, RetryPolicy, is_retryable, with_retry, with_retry_config

FAST = BackoffConfig(initial_delay=0.0, max_delay=0.0, max_retries=2, jitter=False)


class _Flaky(Exception):
    retryable = True


def _counting(failures, exc_type):
    calls = []

    async def func():
        calls.append(1)
        if len(calls) <= failures:
            raise exc_type("boom")
        return len(calls)

    return func, calls


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        ("any text", True),
        (ConnectionError("down"), True),
        (TimeoutError("slow"), True),
        (_Flaky(), True),
        (ValueError("bad"), False),
        (KeyError("k"), False),
    ],
)
def test_is_retryable(error, expected):
    assert is_retryable(error) is expected


@pytest.mark.asyncio
async def test_success_after_retries():
    func, calls = _counting(2, ConnectionError)
    result = await RetryHandler(FAST).execute(func)
    assert result == 3
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_gives_up_when_exhausted():
    func, calls = _counting(100, ConnectionError)
    with pytest.raises(ConnectionError):
        await with_retry_config(FAST, func)
    assert len(calls) == FAST.max_retries + 1


@pytest.mark.asyncio
async def test_non_retryable_raises_immediately():
    func, calls = _counting(5, ValueError)
    with pytest.raises(ValueError):
        await RetryHandler(FAST).execute(func)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_success_resets_backoff():
    handler = RetryHandler(FAST)
    func, _ = _counting(1, ConnectionError)
    await handler.execute(func)
    assert handler.backoff.retry_count == 0


@pytest.mark.asyncio
async def test_with_retry_returns_value():
    async def func():
        return "ok"

    assert await with_retry(func) == "ok"


def test_default_handler_uses_default_config():
    handler = RetryHandler.default_retry()
    assert handler.backoff.config == BackoffConfig()


def test_policy_defaults_and_builders():
    policy = RetryPolicy(5).with_initial_delay(0.25).with_max_delay(9.0).with_multiplier(1.5)
    assert policy == RetryPolicy(max_retries=5, initial_delay=0.25, max_delay=9.0, multiplier=1.5)
    assert RetryPolicy().max_retries == 3


def test_policy_into_config():
    policy = RetryPolicy(4).with_initial_delay(0.5)
    config = policy.into_config()
    assert config == BackoffConfig(
        initial_delay=0.5,
        max_delay=policy.max_delay,
        multiplier=policy.multiplier,
        max_retries=4,
        jitter=True,
    )