"""Building blocks for a Matrix–WeChat bridge: identifiers, event types, retry, limiting, queues, caching and metrics."""

__version__ = "0.1.0"