import pytest

from wxbridge.metrics import (
    Counter,
    Gauge,
    Histogram,
    HistogramTimer,
    Metrics,
    default_buckets,
    metrics,
)


class FakeClock:
    def __init__(self, values):
        self._values = iter(values)

    def __call__(self):
        return next(self._values)


def test_counter_inc_and_inc_by():
    counter = Counter({"room": "lobby"})
    counter.inc()
    counter.inc_by(4)
    assert counter.value == 1 + 4
    assert counter.labels == {"room": "lobby"}


def test_counter_dec_saturates():
    counter = Counter()
    counter.dec()
    assert counter.value == Counter().value
    counter.inc()
    counter.dec()
    counter.dec()
    assert counter.value == Counter().value


def test_counter_rejects_negative_increment():
    with pytest.raises(ValueError):
        Counter().inc_by(-1)


def test_gauge_operations():
    gauge = Gauge()
    gauge.set(2.5)
    gauge.add(1.5)
    gauge.sub(0.5)
    gauge.inc()
    gauge.dec()
    assert gauge.value == 2.5 + 1.5 - 0.5


def test_histogram_cumulative_buckets():
    histogram = Histogram([1.0, 2.0])
    histogram.observe(1.5)
    assert histogram.counts == [0, 1, 1]
    assert histogram.sum == 1.5
    assert histogram.count == 1


def test_histogram_invariants_with_default_buckets():
    histogram = Histogram(default_buckets())
    for value in (0.001, 0.03, 0.7, 20.0):
        histogram.observe(value)
    counts = histogram.counts
    assert len(counts) == len(default_buckets()) + 1
    assert counts[-1] == histogram.count == 4
    assert counts[:-1] == sorted(counts[:-1])


def test_default_buckets_pinned_bounds():
    buckets = default_buckets()
    assert buckets[0] == 0.005
    assert buckets[-1] == 10.0
    assert buckets == sorted(buckets)


def test_histogram_timer_context_manager():
    histogram = Histogram([1.0])
    with HistogramTimer(histogram, clock=FakeClock([10.0, 10.5])):
        pass
    assert histogram.count == 1
    assert histogram.sum == 10.5 - 10.0


def test_histogram_timer_observe_duration():
    histogram = Histogram([1.0])
    timer = HistogramTimer(histogram, clock=FakeClock([3.0, 5.0]))
    timer.observe_duration()
    assert histogram.sum == 5.0 - 3.0
    assert histogram.counts[-1] == histogram.count


def test_to_prometheus_defaults():
    text = Metrics().to_prometheus()
    assert text.startswith(
        "# HELP bridge_messages_bridged Total number of messages bridged\n"
        "# TYPE bridge_messages_bridged counter\n"
        "bridge_messages_bridged 0\n"
    )
    assert "# TYPE bridge_websocket_connections gauge\n" in text
    assert text.endswith("bridge_reconnection_success 0\n")
    assert text.count("# TYPE ") == text.count("# HELP ")


def test_to_prometheus_reflects_values():
    registry = Metrics()
    registry.messages_sent.inc()
    registry.active_users.set(2.5)
    registry.active_portals.set(3.0)
    text = registry.to_prometheus()
    assert "bridge_messages_sent 1\n" in text
    assert "bridge_active_users 2.5\n" in text
    assert "bridge_active_portals 3\n" in text


def test_global_metrics_singleton():
    assert metrics() is metrics()
    assert metrics().to_prometheus().startswith("# HELP bridge_messages_bridged")