from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from ..auth import IdentityProvider, authenticate, sign_out
from ..dependencies import get_identity_provider, read_form

router = APIRouter(tags=["auth"])


@router.get("/login")
async def login_page(callback_url: Optional[str] = Query(None, alias="callbackUrl")):
    # The login form posts callbackUrl back as redirectTo
    return {"page": "login", "redirectTo": callback_url or "/dashboard"}


@router.post("/login")
async def login(
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    form = await read_form(request)
    state = await run_in_threadpool(authenticate, provider, None, form)
    if state.user is None:
        return JSONResponse(status_code=401, content={"message": state.message})

    request.session.clear()
    request.session["user"] = state.user.model_dump()
    return RedirectResponse(state.redirect_to, status_code=303)


@router.post("/logout")
async def logout(request: Request):
    return RedirectResponse(sign_out(request.session), status_code=303)
