"""
Authentication Service Module
=============================

Consolidated authentication service handling:
- Password hashing using salted PBKDF2-HMAC-SHA512
- Signed session tokens carried in the session cookie
- Registration, login and logout with audit trail entries
- Session version tracking for server-side logout
- Account lockout management

Stored password format:
    "<16-byte salt as hex>:<64-byte PBKDF2-SHA512 digest as hex>"
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, UTC
from typing import Optional
from uuid import UUID

from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError
from sqlalchemy.orm import Session

from reportflow.core.config import settings
from reportflow.core.enums import AuditAction, EntityType, UserRole
from reportflow.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    SessionExpiredError,
    SessionInvalidError,
)
from reportflow.core.logging import get_logger, security_logger
from reportflow.models import User
from reportflow.repositories import get_repository_factory
from reportflow.services.audit_service import AuditService

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Password Hashing Parameters
# ==========================

HASH_ALGORITHM = "sha512"
SALT_BYTES = 16
KEY_LENGTH = 64

SESSION_TOKEN_TYPE = "session"


class AuthService:
    """
    Authentication service handling all auth-related operations.

    Usage:
        auth_service = AuthService(db)
        user = auth_service.authenticate_user(email, password, ip_address)
        token = auth_service.create_session_token(user)
    """

    def __init__(self, db: Session):
        """
        Initialize auth service with database session.

        Args:
            db: SQLAlchemy session
        """
        self.db = db

    @property
    def users(self):
        return get_repository_factory().users(self.db)

    @property
    def audit(self) -> AuditService:
        return AuditService(self.db)

    # --------------------------
    # Password Utilities
    # --------------------------

    @staticmethod
    def hash_password(password: str, iterations: Optional[int] = None) -> str:
        """
        Hash a password with a fresh random salt.

        Args:
            password: Plain text password
            iterations: PBKDF2 iterations, defaults to PASSWORD_HASH_ITERATIONS

        Returns:
            "salt:hash" string
        """
        salt = secrets.token_hex(SALT_BYTES)
        digest = hashlib.pbkdf2_hmac(
            HASH_ALGORITHM,
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations or settings.PASSWORD_HASH_ITERATIONS,
            dklen=KEY_LENGTH,
        )
        return f"{salt}:{digest.hex()}"

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str, iterations: Optional[int] = None) -> bool:
        """
        Verify a password against its stored "salt:hash" string.

        Args:
            plain_password: Password to verify
            hashed_password: Stored hash from database
            iterations: PBKDF2 iterations, defaults to PASSWORD_HASH_ITERATIONS

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        if not hashed_password or ":" not in hashed_password:
            logger.warning("Password verification error", extra={"error": "malformed hash"})
            return False

        salt, expected = hashed_password.split(":", 1)
        digest = hashlib.pbkdf2_hmac(
            HASH_ALGORITHM,
            plain_password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations or settings.PASSWORD_HASH_ITERATIONS,
            dklen=KEY_LENGTH,
        )
        return hmac.compare_digest(digest.hex(), expected)

    # --------------------------
    # Session Tokens
    # --------------------------

    @staticmethod
    def create_session_token(
        user: User,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create the signed token stored in the session cookie.

        Args:
            user: Authenticated user
            expires_delta: Custom lifetime, defaults to SESSION_MAX_AGE_SECONDS

        Returns:
            Encoded JWT
        """
        if expires_delta is None:
            expires_delta = timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS)

        now = datetime.now(UTC)
        payload = {
            "sub": str(user.id),
            "token_version": user.token_version,
            "type": SESSION_TOKEN_TYPE,
            "exp": now + expires_delta,
            "iat": now,
            "iss": settings.ISSUER,
            "aud": settings.AUDIENCE,
        }
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> dict:
        """
        Decode and validate a session token.

        Raises:
            SessionExpiredError: If the token has expired
            SessionInvalidError: If the token is invalid
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                issuer=settings.ISSUER,
                audience=settings.AUDIENCE,
            )
        except ExpiredSignatureError:
            raise SessionExpiredError()
        except JWTError as e:
            logger.warning("Session token decode error", extra={"error": str(e)})
            raise SessionInvalidError(reason=str(e))

        if payload.get("type") != SESSION_TOKEN_TYPE:
            raise SessionInvalidError(reason="Unexpected token type")
        return payload

    def validate_session_token(self, token: str) -> User:
        """
        Validate a session token and return its user.

        Raises:
            SessionInvalidError: If the token is invalid or revoked
            SessionExpiredError: If the token has expired
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        payload = self.decode_token(token)

        user_id = payload.get("sub")
        token_version = payload.get("token_version")
        if not user_id or token_version is None:
            raise SessionInvalidError(reason="Invalid token payload")

        try:
            user_uuid = UUID(user_id)
        except ValueError:
            raise SessionInvalidError(reason="Invalid user ID format")

        user = self.users.find_by_id(user_uuid)
        if not user:
            raise SessionInvalidError(reason="User not found")

        if user.token_version != token_version:
            raise SessionInvalidError(reason="Session has been revoked")

        if user.is_locked:
            raise AccountLockedError()

        if not user.is_active:
            raise AccountDisabledError()

        return user

    # --------------------------
    # Registration
    # --------------------------

    def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Register a new account.

        The configured default RBAC role is attached when it exists.

        Raises:
            EmailAlreadyExistsError: If the email is taken
        """
        if self.users.find_by_email(email):
            raise EmailAlreadyExistsError()

        default_role = get_repository_factory().roles(self.db).find_by_name(settings.DEFAULT_ROLE_NAME)

        user = self.users.create({
            "email": email,
            "name": name,
            "hashed_password": self.hash_password(password),
            "role": UserRole.USER.value,
            "role_id": default_role.id if default_role else None,
        })

        self.audit.log_user_action(
            user.id,
            AuditAction.REGISTER,
            EntityType.USER,
            user.id,
            {"email": user.email},
            ip_address,
        )
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    # --------------------------
    # Login / Logout
    # --------------------------

    def authenticate_user(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Authenticate a user with email and password.

        Args:
            email: User's email
            password: User's password
            ip_address: Client IP for the audit trail

        Returns:
            The authenticated user

        Raises:
            InvalidCredentialsError: If credentials are invalid
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        ip_address = ip_address or "unknown"
        user = self.users.find_by_email(email)

        if not user:
            self._record_failed_login(None, email, ip_address, "User not found")
            raise InvalidCredentialsError()

        if user.is_locked:
            self._record_failed_login(user, email, ip_address, "Account locked")
            raise AccountLockedError()

        if not user.is_active:
            self._record_failed_login(user, email, ip_address, "Account disabled")
            raise AccountDisabledError()

        if not self.verify_password(password, user.hashed_password):
            locked = user.increment_failed_attempts(settings.MAX_LOGIN_ATTEMPTS)
            self.db.commit()
            if locked:
                security_logger.log_account_locked(user_id=str(user.id), ip_address=ip_address)
            self._record_failed_login(user, email, ip_address, "Invalid password")
            raise InvalidCredentialsError()

        user.failed_attempts = 0
        user.last_login = datetime.now(UTC)
        self.db.commit()

        self.audit.log_user_action(
            user.id,
            AuditAction.LOGIN,
            EntityType.USER,
            user.id,
            {"email": user.email},
            ip_address,
            user.organization_id,
        )
        security_logger.log_login_success(user_id=str(user.id), ip_address=ip_address)
        return user

    def logout(self, user: User, ip_address: Optional[str] = None) -> None:
        """
        Revoke every session of the user.

        Args:
            user: User model instance
            ip_address: Client IP for the audit trail
        """
        user.invalidate_sessions()
        self.db.commit()

        self.audit.log_user_action(
            user.id,
            AuditAction.LOGOUT,
            EntityType.USER,
            user.id,
            None,
            ip_address,
            user.organization_id,
        )
        security_logger.log_logout(user_id=str(user.id))

    def _record_failed_login(
        self,
        user: Optional[User],
        email: str,
        ip_address: str,
        reason: str,
    ) -> None:
        self.audit.log_user_action(
            user.id if user else None,
            AuditAction.FAILED_LOGIN,
            EntityType.USER,
            user.id if user else None,
            {"email": email, "reason": reason},
            ip_address,
        )
        security_logger.log_login_failure(email=email, ip_address=ip_address, reason=reason)
