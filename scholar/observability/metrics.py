"""Prometheus metrics for AI generation.

Tracks provider calls, fallbacks, admission denials and token usage.
"""

from prometheus_client import Counter, Histogram

GENERATION_REQUESTS = Counter(
    "scholar_generation_requests_total",
    "Total number of generate_text calls handled by the AI service",
    labelnames=["provider", "outcome"],
)

PROVIDER_LATENCY = Histogram(
    "scholar_provider_latency_seconds",
    "Latency of a single provider attempt in seconds",
    labelnames=["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

PROVIDER_RETRIES = Counter(
    "scholar_provider_retries_total",
    "Retries scheduled by the remote provider",
    labelnames=["provider", "error_code"],
)

PROVIDER_ERRORS = Counter(
    "scholar_provider_errors_total",
    "Classified provider failures",
    labelnames=["provider", "error_code"],
)

FALLBACKS = Counter(
    "scholar_fallbacks_total",
    "Requests served by the local fallback path",
    labelnames=["operation", "reason"],
)

RATE_LIMIT_DENIALS = Counter(
    "scholar_rate_limit_denials_total",
    "Calls rejected by local admission control",
    labelnames=["provider"],
)

LLM_TOKENS = Counter(
    "scholar_llm_tokens_total",
    "Total LLM tokens used",
    labelnames=["provider", "model", "direction"],
)
