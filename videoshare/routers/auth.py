import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from videoshare.auth import (
    clear_session_cookie,
    get_optional_session,
    hash_password,
    issue_session_token,
    set_session_cookie,
    verify_credentials,
)
from videoshare.config import Settings, get_app_settings
from videoshare.database import get_db
from videoshare.errors import AuthenticationError, ValidationError
from videoshare.models.user import User
from videoshare.schemas.user import Identity, LoginRequest, RegisterRequest, SessionData, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

SIGNIN_ERROR = "CredentialsSignin"


@router.post("/register", response_model=Identity, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with email and password."""
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")
    if db.query(User).filter(User.email == body.email).first():
        raise ValidationError("Email already registered")
    user = User(email=body.email, password=hash_password(body.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # concurrent registration won the unique email constraint
        db.rollback()
        raise ValidationError("Email already registered") from e
    db.refresh(user)
    logger.info("User %s registered", user.id)
    return Identity(id=user.id, email=user.email)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Login with email and password. Token is returned and also set as the session cookie."""
    try:
        identity = verify_credentials(db, body.email, body.password)
    except ValidationError as e:
        raise AuthenticationError() from e
    token = issue_session_token(identity, settings)
    set_session_cookie(response, token, settings)
    return TokenResponse(access_token=token)


@router.post("/callback/credentials")
def credentials_sign_in(
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    callback_url: str = Form(default="/", alias="callbackUrl"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Form sign-in. Success sets the session cookie and redirects to callbackUrl;
    any failure goes back to the sign-in page with a generic error flag.
    """
    try:
        identity = verify_credentials(db, email, password)
    except (ValidationError, AuthenticationError) as e:
        logger.info("Sign-in failed: %s", e)
        url = f"{settings.sign_in_page}?{urlencode({'error': SIGNIN_ERROR})}"
        return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)
    # only same-site relative targets
    if not callback_url.startswith("/") or callback_url.startswith("//"):
        callback_url = "/"
    response = RedirectResponse(url=callback_url, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, issue_session_token(identity, settings), settings)
    return response


@router.get("/session")
def get_session(session: SessionData | None = Depends(get_optional_session)):
    """Current session, or {} when anonymous."""
    if session is None:
        return JSONResponse(content={})
    return JSONResponse(content=session.model_dump(mode="json"))


@router.post("/signout")
def sign_out(response: Response, settings: Settings = Depends(get_app_settings)):
    clear_session_cookie(response, settings)
    return {"message": "Signed out"}


@router.get("/signin")
def sign_in_page(
    callback_url: str | None = Query(default=None, alias="callbackUrl"),
    settings: Settings = Depends(get_app_settings),
):
    """Sign-in entry point is the frontend page."""
    url = settings.sign_in_page
    if callback_url:
        url = f"{url}?{urlencode({'callbackUrl': callback_url})}"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.get("/error")
def error_page(error: str = SIGNIN_ERROR, settings: Settings = Depends(get_app_settings)):
    """Auth errors are shown on the sign-in page too."""
    url = f"{settings.sign_in_page}?{urlencode({'error': error})}"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
