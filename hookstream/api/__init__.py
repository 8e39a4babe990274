"""hookstream HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives GitHub webhook deliveries.

Public API
----------
create_app
    Application factory wiring the relay resource, publisher lifespan
    middleware and error handler from :class:`AppDependencies`.
"""

from hookstream.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
