"""
Pydantic schemas for the branding board API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class CreateSubmissionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    logoUrl: str = Field(..., min_length=1, max_length=2048)


class SubmissionResponse(BaseModel):
    id: str
    name: str
    description: str
    logoUrl: str
    userName: str
    userImage: Optional[str] = None
    status: Literal["pending", "approved", "rejected"]
    likes: int
    dislikes: int
    myVote: Optional[Literal["like", "dislike"]] = None
    createdAt: str
    updatedAt: str


class HasSubmittedResponse(BaseModel):
    submitted: bool


class CurrentLogoResponse(BaseModel):
    name: str
    imageUrl: str
    likes: int
    dislikes: int
    myVote: Optional[Literal["like", "dislike"]] = None


class UploadResponse(BaseModel):
    success: Literal[True] = True
    fileName: str


class IdentityResponse(BaseModel):
    email: str
    name: str
    image: Optional[str] = None


class MeResponse(BaseModel):
    role: Literal["anonymous", "user", "admin"]
    user: Optional[IdentityResponse] = None
