"""Freckle - schema and data introspection for OpenAPI-described admin APIs."""

__version__ = "0.1.0"
