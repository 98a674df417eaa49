"""
Core utilities and configuration for orgdesk.

This package provides core functionality including logging configuration,
database setup, the shared TTL cache and the error hierarchy.
"""

from orgdesk.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
