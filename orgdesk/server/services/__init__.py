"""Request-scoped dependencies and endpoint helpers for the orgdesk server."""
