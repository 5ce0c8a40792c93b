"""Outbound integration helpers: shared HTTP pool and retry wrapper."""

from riffus.infrastructure.integrations.http_pool import HttpClientPool
from riffus.infrastructure.integrations.resilient_fetch import (
    ResilientFetcher,
    RetryPolicy,
)

__all__ = ["HttpClientPool", "ResilientFetcher", "RetryPolicy"]
