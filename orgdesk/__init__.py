"""orgdesk: backend service for organizational dashboards."""

__version__ = "0.1.0"
