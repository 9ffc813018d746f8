# compass/core/security.py
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from compass.core.config import get_settings
from compass.core.enums import TokenType
from compass.db.mongo import ADMINS, PROVIDERS, get_db
from compass.models.common import parse_oid

pwd = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)

bearer = HTTPBearer(auto_error=False)

# claim that carries the subject id for each token type
_ID_CLAIM = {
    TokenType.provider: "providerId",
    TokenType.admin: "adminId",
}


def _bcrypt_safe(password: str) -> bytes:
    # bcrypt hard limit: 72 BYTES
    if isinstance(password, str):
        password = password.encode("utf-8")
    return password[:72]


def hash_password(password: str) -> str:
    return pwd.hash(_bcrypt_safe(password))


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd.verify(_bcrypt_safe(password), hashed)


# -------------------------
# Tokens
# -------------------------
def create_access_token(subject_id: str, token_type: TokenType) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.token_expire_days)
    claims = {
        _ID_CLAIM[token_type]: str(subject_id),
        "type": token_type.value,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str, token_type: TokenType) -> str:
    """Return the subject id carried by a valid token of ``token_type``."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except JWTError:
        raise _unauthorized("Invalid token")

    subject_id = payload.get(_ID_CLAIM[token_type])
    if not subject_id:
        raise _unauthorized("Invalid token type")
    return subject_id


async def _load_subject(credentials, db, collection: str, token_type: TokenType) -> dict:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token required")

    subject_id = decode_access_token(credentials.credentials, token_type)
    oid = parse_oid(subject_id)
    doc = await db[collection].find_one({"_id": oid}) if oid else None
    if not doc:
        raise _unauthorized("Invalid token")
    return doc


async def get_current_provider(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db=Depends(get_db),
) -> dict:
    doc = await _load_subject(credentials, db, PROVIDERS, TokenType.provider)
    return {
        "id": str(doc["_id"]),
        "email": doc.get("email"),
        "organization_name": doc.get("organization_name"),
    }


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db=Depends(get_db),
) -> dict:
    doc = await _load_subject(credentials, db, ADMINS, TokenType.admin)
    return {
        "id": str(doc["_id"]),
        "email": doc.get("email"),
        "first_name": doc.get("first_name"),
        "last_name": doc.get("last_name"),
    }
