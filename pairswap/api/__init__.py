"""HTTP service for the pool engine."""
