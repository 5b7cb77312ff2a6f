from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SignInPayload(BaseModel):
    email: str
    password: str


class FederatedSignInPayload(BaseModel):
    provider_id: str = "google.com"
    id_token: str


class IdentityResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    display_name: str = ""
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    provider_id: str = "password"
    is_new_user: bool = False


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    is_daily: bool = False
    goal_id: Optional[str] = None
    due_date: Optional[date] = None


class TaskPatch(BaseModel):
    # Completion moves only through the toggle endpoint.
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    is_daily: Optional[bool] = None
    goal_id: Optional[str] = None
    due_date: Optional[date] = None


class GoalCreate(BaseModel):
    title: str
    description: str = ""
    target_date: Optional[date] = None


class GoalPatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    target_date: Optional[date] = None


class NoteCreate(BaseModel):
    title: str
    content: str = ""


class NotePatch(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
