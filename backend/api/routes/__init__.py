"""Application-level API routes (health and readiness)."""
