"""
OpenTelemetry Integration Module

- tracer: trace context injection, extraction and propagation
- metrics: request counters and latency histograms
"""

from .tracer import (
    setup_tracer,
    inject_trace_context,
    extract_trace_context,
    with_trace_context,
    create_span
)
from .metrics import setup_metrics, increment_counter, record_latency

__all__ = [
    "setup_tracer",
    "inject_trace_context",
    "extract_trace_context",
    "with_trace_context",
    "create_span",
    "setup_metrics",
    "increment_counter",
    "record_latency",
]
