"""Telemetry primitives — Span, trace_span, record_spans.

Near-zero overhead when disabled (single ContextVar.get per call).
When enabled, builds hierarchical span trees with timing: a request sent
from inside another handler becomes a child span of the outer request.
Completed root spans are logged via structlog and handed to any active
:func:`record_spans` collector.
"""

from __future__ import annotations

import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

log = structlog.get_logger("courier.telemetry")

# ── Context variables ────────────────────────────────────────────────

_tracing_enabled: ContextVar[bool] = ContextVar("_tracing_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)
_recorder: ContextVar[list[Span] | None] = ContextVar("_recorder", default=None)


# ── Span ─────────────────────────────────────────────────────────────


@dataclass
class Span:
    """Hierarchical timing span for one dispatched request."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    ok: bool = True
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self, *, ok: bool = True) -> None:
        self.end_time = time.perf_counter()
        self.ok = ok

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 2),
            "ok": self.ok,
        }
        if self.annotations:
            result["annotations"] = self.annotations
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


# ── trace_span context manager ───────────────────────────────────────


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a span under the current one, or a new root span.

    Yields None when telemetry is disabled (near-zero overhead).
    """
    if not _tracing_enabled.get():
        yield None
        return

    parent = _current_span.get()
    span = Span(name=name, parent=parent)
    if parent is not None:
        parent.children.append(span)

    token = _current_span.set(span)
    try:
        yield span
    except BaseException:
        span.end(ok=False)
        raise
    else:
        span.end()
    finally:
        _current_span.reset(token)
        if parent is None:
            _finish_root(span)


def _finish_root(span: Span) -> None:
    """Log a completed root span and hand it to the active recorder."""
    log.debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=span.ok,
        children=len(span.children),
    )
    recorded = _recorder.get()
    if recorded is not None:
        recorded.append(span)


@contextmanager
def record_spans() -> Generator[list[Span]]:
    """Collect root spans completed inside the block (enables tracing for it)."""
    spans: list[Span] = []
    recorder_token = _recorder.set(spans)
    enabled_token = _tracing_enabled.set(True)
    try:
        yield spans
    finally:
        _tracing_enabled.reset(enabled_token)
        _recorder.reset(recorder_token)


# ── Public helpers ───────────────────────────────────────────────────


def enable_telemetry() -> None:
    """Enable tracing (called by AppContext at startup when verbose)."""
    _tracing_enabled.set(True)


def disable_telemetry() -> None:
    """Disable tracing."""
    _tracing_enabled.set(False)


def telemetry_enabled() -> bool:
    return _tracing_enabled.get()


def get_current_span() -> Span | None:
    """Get the current active span (for manual annotation)."""
    if not _tracing_enabled.get():
        return None
    return _current_span.get()
