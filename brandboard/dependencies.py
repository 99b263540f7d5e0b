"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from brandboard.auth import AuthorizationGate, Identity, TokenDecoder, bearer_token
from brandboard.config import Settings, get_settings
from brandboard.service import BrandingService
from brandboard.storage import (
    InMemoryStorageClient,
    LocalStorageClient,
    S3StorageClient,
    StorageClient,
)
from brandboard.store import JsonFileSubmissionStore, SqlSubmissionStore, SubmissionStore

_store: SubmissionStore | None = None
_storage_client: StorageClient | None = None


def get_store() -> SubmissionStore:
    """
    Return a singleton store so the document locks are shared across requests.
    """
    global _store
    if _store:
        return _store

    settings = get_settings()
    if settings.database_url:
        _store = SqlSubmissionStore(settings.database_url)
    else:
        _store = JsonFileSubmissionStore(
            settings.submissions_path, settings.current_logo_path
        )
    return _store


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient(base_url=settings.upload_url_prefix)
    elif settings.s3_bucket:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    else:
        _storage_client = LocalStorageClient(
            root_dir=settings.upload_dir, url_prefix=settings.upload_url_prefix
        )
    return _storage_client


def get_gate() -> AuthorizationGate:
    return AuthorizationGate(get_settings().admin_email)


def get_token_decoder() -> TokenDecoder:
    settings = get_settings()
    return TokenDecoder(settings.jwt_secret, settings.jwt_algorithm)


def get_identity(
    request: Request,
    decoder: TokenDecoder = Depends(get_token_decoder),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """Identity from the bearer token, falling back to the session cookie."""
    token = bearer_token(request.headers.get("Authorization"))
    if not token:
        token = request.cookies.get(settings.session_cookie_name)
    return decoder.decode(token)


def get_branding_service(
    store: SubmissionStore = Depends(get_store),
    gate: AuthorizationGate = Depends(get_gate),
) -> BrandingService:
    return BrandingService(store, gate)
