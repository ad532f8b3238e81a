# wxbridge

Building blocks for a Matrix puppeting bridge that connects Matrix rooms with
WeChat chats. Everything runs on the standard library; the asynchronous parts
use `asyncio`.

## Modules

- `wxbridge.uid` – `UID`, a WeChat identifier with a user (`u`) or group (`g`)
  tag. `str(uid)` joins the two with `\x01`, and `UID.parse` reverses it,
  raising `ValueError` on malformed text.
- `wxbridge.contact` – `ContactInfo` (uin, name, remark).
- `wxbridge.events` – Matrix bodies as dataclasses: `RoomEvent`,
  `EphemeralEvent`, `ToDeviceEvent`, `Transaction`, `EventContent`,
  `RoomMemberContent`, `RoomCreateContent`, `PowerLevelsContent`,
  `CreateRoomRequest`, `JoinedMembersResponse`, `ProfileResponse`,
  `ErrorResponse` and others, with `from_dict` / `to_dict` conversions.
  Invalid input raises `ValueError`.
- `wxbridge.thirdparty` – payloads for third-party protocol lookups:
  `protocol_payload`, `networks_for_portals`, `locations_for_portals` and
  `users_for_puppets`. Portals and puppets may be mappings or objects with
  attributes.
- `wxbridge.backoff` – `BackoffConfig` and the `ExponentialBackoff`,
  `LinearBackoff`, `FixedBackoff` and `ImmediateBackoff` schedules, also made
  through `BackoffStrategy.create_backoff`. Delays are in seconds;
  `next_delay()` returns `None` once retries are exhausted.
- `wxbridge.retry` – `RetryHandler`, `with_retry`, `with_retry_config`,
  `is_retryable` and `RetryPolicy`. Connection and timeout errors, and
  exceptions with a true `retryable` attribute, are retried.
- `wxbridge.reconnection` – `ReconnectionManager` tracking a
  `ConnectionState` and waiting out backoff delays, a reconnect event channel
  (`create_reconnect_channel`, `ReconnectEvent`, `ReconnectEventKind`) and
  `ConnectionGuard`.
- `wxbridge.cache` – `Cache`, which evicts its oldest entry when full, and
  `LruCache`, which evicts its least recently used entry; both take an
  optional TTL per cache and per insert.
- `wxbridge.msgqueue` – `MessageQueue` (bounded FIFO with a concurrency
  semaphore), `PriorityQueue` (high 8+, normal 4–7, low 0–3) and
  `DelayedQueue`. A full queue raises `QueueFullError`.
- `wxbridge.limiter` – `ConcurrencyLimiter` handing out `Permit`s,
  `MultiLimiter`, `RateLimiter`, `TokenBucket` and `AdaptiveLimiter`.
- `wxbridge.metrics` – `Counter`, `Gauge`, `Histogram`, `HistogramTimer` and
  the process-wide `Metrics` set from `metrics()`, rendered in the Prometheus
  text format by `to_prometheus`.

## Examples

```python
from wxbridge.uid import UID

uid = UID.new_group("12345")
assert uid.is_group()
assert UID.parse(str(uid)) == uid
```

```python
from wxbridge.events import EventContent

assert EventContent.text("hello").to_dict() == {"msgtype": "m.text", "body": "hello"}
```

```python
from wxbridge.backoff import BackoffConfig, FixedBackoff

backoff = FixedBackoff(BackoffConfig(initial_delay=0.5, max_retries=2))
assert [backoff.next_delay() for _ in range(3)] == [0.5, 0.5, None]
```

```python
from wxbridge.cache import Cache

cache = Cache(max_size=2)
cache.insert("a", 1)
assert cache.get("a") == 1
```

```python
from wxbridge.metrics import Metrics

m = Metrics()
m.messages_sent.inc()
assert "bridge_messages_sent 1\n" in m.to_prometheus()
```

```python
import asyncio

from wxbridge.retry import with_retry


async def fetch() -> str:
    return "ok"


assert asyncio.run(with_retry(fetch)) == "ok"
```

## What this package does not do

It holds no Matrix HTTP client, no application-service server, no health or
provisioning web endpoints, no database and no command-line program. The
`events` and `thirdparty` modules build and parse the bodies such pieces
would exchange, but sending or serving them is left to the code that uses
this package.

## Tests

The test suite uses pytest, pytest-asyncio and respx, listed in the `test`
extra.