"""
Invite and profile I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class InviteCreate(BaseModel):
    role: Optional[str] = Field(default=None, description="Human-readable role name")
    specializations: List[str] = Field(default_factory=list, description="Specialization IDs granted on sign-up")
    max_uses: Optional[int] = 1
    expires_at: Optional[datetime] = None


class InviteLink(BaseModel):
    code: str
    inviteLink: str


class InviteRead(BaseModel):
    code: str
    role: str
    inviter_id: Optional[str] = None
    max_uses: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


class ApplyInviteRequest(BaseModel):
    invite: Optional[str] = Field(default=None, description="Invite code")


class ApplyInviteResponse(BaseModel):
    success: bool = True
    role: str
    specializations: List[str] = Field(default_factory=list)
