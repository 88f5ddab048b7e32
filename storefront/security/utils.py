from passlib.context import CryptContext
from datetime import datetime, timedelta
import jwt, uuid, hashlib
from typing import Tuple
from storefront.core.config import settings
from storefront.core.errors import AuthenticationError

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto')

def hash_password(p: str) -> str: return pwd_ctx.hash(p)

def verify_password(p: str, h: str) -> bool: return pwd_ctx.verify(p, h)

def now_utc() -> datetime: return datetime.utcnow()

def token_sha256(t: str) -> str: return hashlib.sha256(t.encode('utf-8')).hexdigest()

def _sign(claims: dict) -> str:
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def create_access_token(user_id: int, role: str) -> Tuple[str, datetime]:
    """Short lived bearer token carrying the user's id and role."""
    exp = now_utc() + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRES_SECONDS)
    return _sign({'sub': str(user_id), 'role': role, 'exp': exp, 'type': 'access'}), exp

def create_refresh_token(user_id: int) -> Tuple[str, str, datetime]:
    """Returns (token, jti, expiry). Only the token's sha256 is persisted."""
    exp = now_utc() + timedelta(days=settings.REFRESH_TOKEN_EXPIRES_DAYS)
    jti = uuid.uuid4().hex
    return _sign({'sub': str(user_id), 'jti': jti, 'exp': exp, 'type': 'refresh'}), jti, exp

def decode_token(token: str, expected_type: str) -> dict:
    """Verify signature, expiry and token type; failures surface as 401s."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Your token has expired. Please log in again')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid token. Please log in again')
    if claims.get('type') != expected_type or not str(claims.get('sub', '')).isdigit():
        raise AuthenticationError(f'Invalid {expected_type} token')
    if expected_type == 'refresh' and not claims.get('jti'):
        raise AuthenticationError('Invalid refresh token')
    return claims
