from typing import Dict

from fastapi import Request

from .database import DatabaseClient
from .auth import IdentityProvider
from .cache import ViewCache


def get_store(request: Request) -> DatabaseClient:
    return request.app.state.store


def get_view_cache(request: Request) -> ViewCache:
    return request.app.state.view_cache


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


async def read_form(request: Request) -> Dict[str, str]:
    """Form fields as plain strings; file uploads are ignored."""
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}
