"""
CORS middleware configuration.

Lets the diagram front-end call the analysis API from its own origin.
Allowed origins come from settings (comma-separated ALLOWED_ORIGINS).
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contractviz.config import get_settings


def setup_cors(app: FastAPI) -> None:
    """Attach CORS middleware to the FastAPI application."""
    origins = get_settings().allowed_origins_list

    # The API is read-only analysis: no cookies, POST for payloads
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
