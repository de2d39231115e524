"""Metrics hook protocol.

The client reports counters and timings through an object satisfying
:class:`MetricsHook`.  Without one, :class:`NoopMetricsHook` drops every
data point.

Metric names:

* ``notionsync.requests_total`` (counter, tags ``method``, ``status``)
* ``notionsync.retries_total`` (counter)
* ``notionsync.rate_limited_total`` (counter)
* ``notionsync.request_duration_ms`` (timing)
* ``notionsync.rate_limit_wait_ms`` (timing)
* ``notionsync.blocks_appended_total`` (counter)
* ``notionsync.push_total`` (counter, tag ``strategy``)
* ``notionsync.strategy_fallback_total`` (counter, tag ``reason``)
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """What a metrics backend has to implement.

    *tags* maps string keys to string values; backends translate them into
    their own labelling scheme.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration of *ms* milliseconds under *name*."""
        ...


class NoopMetricsHook:
    """A :class:`MetricsHook` that records nothing."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: Any | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return hook if hook is not None else NoopMetricsHook()
