from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from videoshare.config import Settings, get_app_settings, get_settings
from videoshare.errors import AuthenticationError, AuthorizationError, ValidationError
from videoshare.models.user import User
from videoshare.schemas.user import Identity, SessionData, SessionUser

security = HTTPBearer(auto_error=False)

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

TOKEN_TYPE = "session"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def verify_credentials(db: Session, email: str | None, password: str | None) -> Identity:
    """
    Sign-in check. Unknown email and wrong password raise the same AuthenticationError
    so callers cannot tell which emails are registered.
    """
    if not email or not password:
        raise ValidationError("Missing email or password")
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        # keep timing close to the wrong-password path
        pwd_context.dummy_verify()
        raise AuthenticationError()
    if not verify_password(password, user.password):
        raise AuthenticationError()
    return Identity(id=user.id, email=user.email)


def build_token_claims(token: dict, user: Identity | None = None) -> dict:
    """On sign-in copy the user id into the claims; afterwards claims pass through unchanged."""
    if user is not None:
        return {**token, "sub": user.id, "id": user.id, "email": user.email}
    return token


def issue_session_token(identity: Identity, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    now = datetime.utcnow()
    claims = build_token_claims({}, identity)
    claims.update(
        iat=now,
        exp=now + timedelta(days=settings.session_max_age_days),
        type=TOKEN_TYPE,
    )
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_session_token(token: str | None, settings: Settings | None = None) -> dict | None:
    """Claims of a valid, unexpired session token; None for anything else."""
    if not token:
        return None
    settings = settings or get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if claims.get("type") != TOKEN_TYPE or not claims.get("id"):
        return None
    return claims


def materialize_session(claims: dict) -> SessionData:
    return SessionData(
        user=SessionUser(id=claims["id"], email=claims.get("email")),
        expires=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )


def set_session_cookie(response: Response, token: str, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    response.delete_cookie(settings.session_cookie_name)


def get_optional_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_app_settings),
) -> SessionData | None:
    """
    Session from Bearer header, else from the session cookie. A Bearer token that
    fails to decode falls back to the cookie. Absent, invalid or expired -> None.
    """
    claims = None
    if credentials:
        claims = decode_session_token(credentials.credentials, settings)
    if claims is None:
        claims = decode_session_token(request.cookies.get(settings.session_cookie_name), settings)
    if claims is None:
        return None
    return materialize_session(build_token_claims(claims))


def require_session(
    session: SessionData | None = Depends(get_optional_session),
) -> SessionData:
    if session is None:
        raise AuthorizationError()
    return session
