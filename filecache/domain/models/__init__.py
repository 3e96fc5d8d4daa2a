"""Domain models shared across the cache layers."""
