"""Cron trigger routes: POST /cron, GET /tokens."""
from __future__ import annotations

import hmac

from fastapi import APIRouter, Depends, HTTPException, Response

from loop_notifications.api.deps import get_helper
from loop_notifications.core.settings import get_settings
from loop_notifications.notification.helper import Helper

router = APIRouter(tags=["notifications"])


@router.post("/cron", status_code=204, summary="Run the mail notification job")
def run_cron(key: str | None = None, helper: Helper = Depends(get_helper)) -> Response:
    cron_key = get_settings().cron_key
    if cron_key and not hmac.compare_digest((key or "").encode(), cron_key.encode()):
        raise HTTPException(status_code=403, detail="Invalid cron key")

    helper.cron()
    return Response(status_code=204)


@router.get("/tokens", summary="List mail notification template tokens")
def list_tokens(helper: Helper = Depends(get_helper)) -> dict:
    return helper.mail_helper.token_info()
