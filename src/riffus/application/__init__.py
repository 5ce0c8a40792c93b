"""Application layer - use cases orchestrating providers and caches."""
