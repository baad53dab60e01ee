# pdf_tools/main.py
import logging

import httpx
from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from . import config
from .api import EXCEPTION_HANDLERS, router as api_router
from .auth import (
    authenticate,
    create_session,
    create_user,
    get_current_user_email,
    get_user,
    init_db,
    is_protected,
    normalize_email,
    safe_callback,
    set_subscription,
    signin_redirect_url,
)
from .pages import auth_page, convert_page, dashboard_page, home_page
from .usage import UsageStore

logger = logging.getLogger(__name__)


# ----------------------------
# App
# ----------------------------
app = FastAPI(title="PDF Tools")
app.include_router(api_router)
for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)


@app.on_event("startup")
async def on_startup():
    config.configure_logging()
    init_db()
    app.state.policy = config.load_policy()
    app.state.http_client = httpx.AsyncClient()
    if not config.convertapi_secret():
        logger.error("%s is not set; /api/convert will fail", config.CONVERTAPI_SECRET_ENV)


@app.on_event("shutdown")
async def on_shutdown():
    await app.state.http_client.aclose()


@app.middleware("http")
async def require_session(request: Request, call_next):
    # Dashboard and tool pages need a signed-in user
    if is_protected(request.url.path) and not get_current_user_email(request):
        return RedirectResponse(signin_redirect_url(request.url.path), status_code=302)
    return await call_next(request)


def _login_response(email: str, target: str) -> RedirectResponse:
    res = RedirectResponse(target, status_code=302)
    res.set_cookie(
        config.COOKIE_NAME,
        create_session(email),
        httponly=True,
        samesite="lax",
        secure=config.COOKIE_SECURE,
        max_age=config.SESSION_MAX_AGE_SECONDS,
        path="/",
    )
    return res


# ----------------------------
# Health
# ----------------------------
@app.get("/health")
def health():
    return {"ok": True, "max_upload_mb": config.MAX_UPLOAD_MB}


# ----------------------------
# UI Routes
# ----------------------------
@app.get("/")
def home(request: Request):
    return HTMLResponse(home_page(get_current_user_email(request)))


@app.get("/dashboard")
def dashboard(request: Request):
    email = get_current_user_email(request)
    user = get_user(email)
    if not user:
        res = RedirectResponse(signin_redirect_url("/dashboard"), status_code=302)
        res.delete_cookie(config.COOKIE_NAME, path="/")
        return res
    usage = UsageStore.from_request(request)
    return HTMLResponse(dashboard_page(user["email"], user["subscription"], usage))


@app.get("/tools/convert")
def convert_tool(request: Request):
    return HTMLResponse(convert_page(UsageStore.from_request(request)))


@app.post("/tools/usage")
def record_usage(request: Request):
    usage = UsageStore.from_request(request)
    usage.record_conversion()
    res = JSONResponse(usage.to_dict())
    usage.save(res)
    return res


@app.post("/tools/subscribe")
def subscribe(request: Request):
    usage = UsageStore.from_request(request)
    usage.subscribe()
    set_subscription(get_current_user_email(request), "premium")
    res = RedirectResponse("/tools/convert", status_code=302)
    usage.save(res)
    return res


# ----------------------------
# AUTH Routes
# ----------------------------
@app.get("/auth/signin")
def signin_page(callbackUrl: str = "/dashboard"):
    return HTMLResponse(auth_page("signin", safe_callback(callbackUrl)))


@app.get("/auth/signup")
def signup_page(callbackUrl: str = "/dashboard"):
    return HTMLResponse(auth_page("signup", safe_callback(callbackUrl)))


@app.post("/auth/signup")
def signup(email: str = Form(...), password: str = Form(...), callbackUrl: str = Form("/dashboard")):
    target = safe_callback(callbackUrl)
    try:
        create_user(email, password)
    except HTTPException as e:
        return HTMLResponse(auth_page("signup", target, error=e.detail), status_code=e.status_code)
    return _login_response(normalize_email(email), target)


@app.post("/auth/signin")
def signin(email: str = Form(...), password: str = Form(...), callbackUrl: str = Form("/dashboard")):
    target = safe_callback(callbackUrl)
    user = authenticate(email, password)
    if not user:
        return HTMLResponse(auth_page("signin", target, error="Invalid email or password"), status_code=400)
    return _login_response(user["email"], target)


# Support GET and POST logout (the dashboard uses POST)
@app.get("/auth/logout")
@app.post("/auth/logout")
def logout():
    res = RedirectResponse("/", status_code=302)
    res.delete_cookie(config.COOKIE_NAME, path="/")
    return res


@app.get("/auth/me")
def auth_me(request: Request):
    email = get_current_user_email(request)
    return {"logged_in": bool(email), "email": email}
