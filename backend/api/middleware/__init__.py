"""Request-level guards and dependencies."""
