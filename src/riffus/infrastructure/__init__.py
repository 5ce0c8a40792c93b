"""Infrastructure layer - HTTP integrations, providers, persistence and observability."""
