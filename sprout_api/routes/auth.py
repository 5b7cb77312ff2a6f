from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from sprout_api.auth import require_backend_token
from sprout_api.schemas import FederatedSignInPayload, IdentityResponse, SignInPayload
from sprout_api.services import identity_service
from sprout_api.services.identity_service import IdentityError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_backend_token)])


def _identity_error(exc: IdentityError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.post("/v1/auth/sign-in", response_model=IdentityResponse)
async def sign_in(payload: SignInPayload):
    try:
        return await identity_service.sign_in_with_password(payload.email, payload.password)
    except IdentityError as exc:
        raise _identity_error(exc)


@router.post("/v1/auth/sign-up", response_model=IdentityResponse)
async def sign_up(payload: SignInPayload):
    try:
        return await identity_service.sign_up(payload.email, payload.password)
    except IdentityError as exc:
        raise _identity_error(exc)


@router.post("/v1/auth/federated", response_model=IdentityResponse)
async def federated_sign_in(payload: FederatedSignInPayload):
    try:
        return await identity_service.sign_in_with_provider(payload.provider_id, payload.id_token)
    except IdentityError as exc:
        raise _identity_error(exc)


@router.post("/v1/auth/sign-out")
async def sign_out():
    # Tokens are held by the dashboard session only; nothing to revoke here.
    return {"ok": True}
