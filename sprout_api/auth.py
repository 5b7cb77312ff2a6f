from __future__ import annotations

from datetime import date, tzinfo

from fastapi import Depends, Header, HTTPException

from sprout_api.services.clock import local_today, resolve_timezone
from sprout_api.settings import get_settings


async def require_backend_token(
    x_backend_token: str | None = Header(default=None, alias="X-Backend-Token"),
) -> None:
    settings = get_settings()
    if not x_backend_token or x_backend_token != settings.backend_session_secret:
        raise HTTPException(status_code=401, detail="Invalid backend token")


async def require_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    _token: None = Depends(require_backend_token),
) -> str:
    settings = get_settings()
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing user id")
    user_id = x_user_id.strip()
    if settings.allowed_user_ids and user_id not in settings.allowed_user_ids:
        raise HTTPException(status_code=403, detail="User not allowed")
    return user_id


async def viewer_timezone(
    x_timezone: str | None = Header(default=None, alias="X-Timezone"),
) -> tzinfo:
    return resolve_timezone(x_timezone, get_settings().app_timezone)


async def viewer_today(tz: tzinfo = Depends(viewer_timezone)) -> date:
    return local_today(tz)
