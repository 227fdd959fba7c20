"""
Wire — the HTTP surface.

    from storefront.wire import build_services, create_app

    app = create_app(build_services(session_factory, gateway, identity))

Production:
    uvicorn --factory storefront.wire:create_app_from_settings
"""

from storefront.wire._app import (
    Services,
    build_services,
    error_response,
    respond,
    create_app,
    create_app_from_settings,
)
from storefront.wire import _schemas as schemas

__all__ = (
    "Services",
    "build_services",
    "error_response",
    "respond",
    "create_app",
    "create_app_from_settings",
    "schemas",
)
