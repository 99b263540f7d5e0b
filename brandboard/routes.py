"""
HTTP routes for the branding board API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from brandboard.auth import AuthorizationGate, Identity
from brandboard.config import Settings, get_settings
from brandboard.dependencies import (
    get_branding_service,
    get_gate,
    get_identity,
    get_storage_client,
)
from brandboard.records import CurrentLogoStats, Submission, VoteDirection
from brandboard.schemas import (
    CreateSubmissionRequest,
    CurrentLogoResponse,
    HasSubmittedResponse,
    IdentityResponse,
    MeResponse,
    SubmissionResponse,
    UploadResponse,
)
from brandboard.service import BrandingService
from brandboard.storage import StorageClient
from brandboard.uploads import save_logo

logger = logging.getLogger(__name__)

router = APIRouter()


def _email_of(identity: Optional[Identity]) -> Optional[str]:
    return identity.email if identity else None


def _submission_response(
    submission: Submission, identity: Optional[Identity]
) -> SubmissionResponse:
    my_vote = submission.action_for(_email_of(identity))
    return SubmissionResponse(
        id=submission.id,
        name=submission.name,
        description=submission.description,
        logoUrl=submission.logo_url,
        userName=submission.user_name,
        userImage=submission.user_image,
        status=submission.status.value,
        likes=submission.likes,
        dislikes=submission.dislikes,
        myVote=my_vote.value if my_vote else None,
        createdAt=submission.created_at,
        updatedAt=submission.updated_at,
    )


def _logo_response(
    stats: CurrentLogoStats, identity: Optional[Identity], settings: Settings
) -> CurrentLogoResponse:
    my_vote = stats.action_for(_email_of(identity))
    return CurrentLogoResponse(
        name=settings.current_logo_name,
        imageUrl=settings.current_logo_image_url,
        likes=stats.likes,
        dislikes=stats.dislikes,
        myVote=my_vote.value if my_vote else None,
    )


@router.get("/me", response_model=MeResponse)
def me(
    identity: Optional[Identity] = Depends(get_identity),
    gate: AuthorizationGate = Depends(get_gate),
):
    user = (
        IdentityResponse(email=identity.email, name=identity.name, image=identity.image)
        if identity
        else None
    )
    return MeResponse(role=gate.role_for(identity).value, user=user)


@router.get("/submissions", response_model=list[SubmissionResponse])
def list_approved_submissions(
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    return [_submission_response(s, identity) for s in service.list_approved()]


@router.get("/submissions/pending", response_model=list[SubmissionResponse])
def list_pending_submissions(
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    return [_submission_response(s, identity) for s in service.list_pending(identity)]


@router.get("/submissions/mine", response_model=HasSubmittedResponse)
def has_submitted(
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    return HasSubmittedResponse(submitted=service.has_user_submitted(identity))


@router.post("/submissions", response_model=SubmissionResponse, status_code=201)
def create_submission(
    payload: CreateSubmissionRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    submission = service.create_submission(
        identity,
        name=payload.name,
        description=payload.description,
        logo_url=payload.logoUrl,
    )
    return _submission_response(submission, identity)


@router.post("/submissions/{submission_id}/approve", response_model=SubmissionResponse)
def approve_submission(
    submission_id: str,
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    return _submission_response(service.approve(identity, submission_id), identity)


@router.post("/submissions/{submission_id}/reject", response_model=SubmissionResponse)
def reject_submission(
    submission_id: str,
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    return _submission_response(service.reject(identity, submission_id), identity)


@router.post(
    "/submissions/{submission_id}/{direction}", response_model=SubmissionResponse
)
def vote_submission(
    submission_id: str,
    direction: VoteDirection,
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
):
    submission = service.vote(identity, submission_id, direction)
    return _submission_response(submission, identity)


@router.get("/current-logo", response_model=CurrentLogoResponse)
def current_logo(
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
    settings: Settings = Depends(get_settings),
):
    return _logo_response(service.current_logo_stats(), identity, settings)


@router.post("/current-logo/{direction}", response_model=CurrentLogoResponse)
def vote_current_logo(
    direction: VoteDirection,
    identity: Optional[Identity] = Depends(get_identity),
    service: BrandingService = Depends(get_branding_service),
    settings: Settings = Depends(get_settings),
):
    stats = service.vote_current_logo(identity, direction)
    return _logo_response(stats, identity, settings)


@router.post("/upload", response_model=UploadResponse)
async def upload_logo(
    file: UploadFile = File(...),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AuthorizationGate = Depends(get_gate),
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
):
    gate.require_user(identity)
    data = await file.read(settings.max_upload_bytes + 1)
    reference = save_logo(
        storage,
        data,
        filename=file.filename,
        content_type=file.content_type,
        allowed_types=settings.allowed_image_types,
        max_bytes=settings.max_upload_bytes,
    )
    return UploadResponse(fileName=reference)
