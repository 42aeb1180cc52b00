"""
Exception handlers for the Capability Broker server.

This package maps broker errors, request validation failures and any other
unhandled exception onto the ``{"error": ...}`` JSON body.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
