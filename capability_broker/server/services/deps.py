"""
Request Dependencies.

Provides the service container and the authenticated caller to API endpoints.
"""

from typing import Annotated

from fastapi import Depends, Request

from capability_broker.broker.errors import UnauthenticatedError
from capability_broker.server.auth import CallerIdentity
from capability_broker.server.services.container import BrokerServices, get_services

ServicesDep = Annotated[BrokerServices, Depends(get_services)]


def require_identity(request: Request, services: ServicesDep) -> CallerIdentity:
    """
    Resolve the caller, rejecting the request before any other processing.

    Raises:
        UnauthenticatedError: If the identity collaborator reports no caller.
    """
    identity = services.identity.extract(request)
    if identity is None:
        raise UnauthenticatedError()
    return identity


IdentityDep = Annotated[CallerIdentity, Depends(require_identity)]
