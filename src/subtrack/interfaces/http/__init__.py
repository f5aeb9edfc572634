"""HTTP adapter: FastAPI application exposing auth and migration endpoints."""

from .app import create_app

__all__ = ["create_app"]
