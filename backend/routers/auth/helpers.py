from fastapi import HTTPException, status
from passlib.context import CryptContext
from config import SecurityConfig, get_security_config
from datetime import datetime, timedelta
from typing import Optional
import jwt
import logging

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # stored value is not a recognised hash
        return False


class AuthHelpers:
    """Helper functions for authentication operations"""

    def __init__(self, config: Optional[SecurityConfig] = None):
        self._config = config

    @property
    def config(self) -> SecurityConfig:
        if self._config is None:
            self._config = get_security_config()
        return self._config

    def create_access_token(self, user_id: int, name: str, role: str) -> str:
        """
        Issue a signed token carrying the user id (sub), display name and role
        """
        now = datetime.utcnow()
        payload = {
            "sub": str(user_id),
            "name": name,
            "role": role,
            "iat": now,
            "exp": now + timedelta(days=self.config.token_expire_days),
        }
        return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)

    def verify_token(self, token: str) -> dict:
        """
        Verify JWT token locally
        Returns the claims needed by the routers
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_signature": True,
                    "verify_aud": False
                }
            )

            user_id = payload.get("sub")
            if not user_id:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid token: missing user ID"
                )

            return {
                "user_id": user_id,
                "name": payload.get("name"),
                "role": payload.get("role"),
            }

        except HTTPException:
            raise
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token expired")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired"
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )


auth_helpers = AuthHelpers()
