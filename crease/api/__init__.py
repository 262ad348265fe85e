"""Crease HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application exposing the ``/event`` delivery submission route and
the ``/health`` and ``/ready`` probes.

Usage
-----
Create the application from injected collaborators::

    from crease.api import AppDependencies, create_app

    app = create_app(dependencies)

"""

from crease.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
