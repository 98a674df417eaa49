"""
Exception handlers for the orgdesk server.

This package contains the handlers that turn every failure into a
``{"error": message}`` JSON body and a setup function to register them.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
