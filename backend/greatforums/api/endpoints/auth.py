"""
Auth Endpoints.

Registration, login and logout pages.
"""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse, Response

from greatforums.api.deps import get_auth_service, get_current_user
from greatforums.api.templating import render
from greatforums.core.config import settings
from greatforums.core.exceptions import ForumError
from greatforums.models.user import User
from greatforums.modules.auth.service import AuthService

router = APIRouter()


@router.get("/register")
async def register_form(
    request: Request,
    user: User | None = Depends(get_current_user),
) -> Response:
    """Show registration form."""
    return render(request, "register.html", {"user": user})


@router.post("/register")
async def register(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    """Create account and send user to the login page."""
    try:
        await auth.register(username, email, password)
    except ForumError as e:
        return render(
            request,
            "register.html",
            {"message": e.message, "username": username, "email": email},
            status_code=e.status_code,
        )

    return RedirectResponse("/login?registered=true", status_code=303)


@router.get("/login")
async def login_form(
    request: Request,
    registered: str | None = None,
    user: User | None = Depends(get_current_user),
) -> Response:
    """Show login form."""
    message = ""
    if registered == "true":
        message = "Registration successful. Please log in."
    return render(request, "login.html", {"message": message, "user": user})


@router.post("/login")
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    """Check credentials, start session and set the session cookie."""
    try:
        user = await auth.authenticate(username, password)
    except ForumError as e:
        return render(
            request,
            "login.html",
            {"message": e.message, "username": username},
            status_code=e.status_code,
        )

    session = await auth.create_session(user)

    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        expires=session.expiry.strftime("%a, %d %b %Y %H:%M:%S GMT"),
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    """End session and clear the session cookie."""
    await auth.delete_session(request.cookies.get(settings.session_cookie_name))

    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response
