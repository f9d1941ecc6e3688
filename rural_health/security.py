import secrets
import logging
from io import BytesIO
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import qrcode
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from passlib.context import CryptContext

from .config import get_settings
from .database import get_db
from . import models

auth_logger = logging.getLogger("rural_health.auth")

# Every stored password uses bcrypt at cost 10
BCRYPT_ROUNDS = 10
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

# tokenUrl feeds the OpenAPI "Authorize" dialog
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/token")

ACCESS_TOKEN_TYPE = "access"


# ---------- passwords ----------

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, password_hash: str) -> bool:
    """True only when `plain_password` matches; malformed hashes never match."""
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        return False


# ---------- access tokens ----------

def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an HS256 access token carrying `claims` plus exp/iat/jti."""
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    payload = dict(claims)
    payload.update(
        type=ACCESS_TOKEN_TYPE,
        iat=issued_at,
        exp=issued_at + lifetime,
        jti=secrets.token_urlsafe(16),
    )
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)

def verify_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[Dict[str, Any]]:
    """Decoded claims, or None for a bad signature, an expired token or the wrong type."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    return claims if claims.get("type") == token_type else None

def token_for_user(user: models.User) -> str:
    return create_access_token({"sub": user.username, "user_id": user.id, "role": user.role.value})


# ---------- request dependencies ----------

def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    """The active account behind the bearer token; 401 otherwise."""
    # crud imports the hashing helpers from here
    from . import crud

    claims = verify_token(token)
    if not claims or not claims.get("sub") or not claims.get("user_id"):
        auth_logger.warning(f"Rejected bearer token on {request.url.path}")
        raise _unauthorized()

    user = crud.get_user(db, user_id=claims["user_id"])
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        auth_logger.warning(f"Deactivated account '{user.username}' tried {request.url.path}")
        raise _unauthorized()
    return user

def require_role(*roles: str):
    """Dependency factory: the current user must hold one of `roles`."""
    # ("admin",) -> "Admin access required"; ("admin", "health_worker") -> "Admin or health worker access required"
    detail = " or ".join(role.replace("_", " ") for role in roles).capitalize() + " access required"

    def checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        if current_user.role.value not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user

    return checker

require_admin = require_role(models.UserRole.admin.value)


# ---------- QR codes ----------

def qr_code_png(payload: str) -> bytes:
    """PNG image of a patient's QR payload, sized for the printed vaccination card."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(payload)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    out = BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()
