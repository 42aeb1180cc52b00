"""
Middleware modules for the Capability Broker server.
"""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
