"""Dashboard accounts, password hashing and bearer sessions."""

import hashlib
import hmac
import logging
import re
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from ..storage import Database
from ..storage.models import User, Profile, Session, utcnow

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 100000


def hash_password(password: str) -> str:
    """Hash a password."""
    salt = secrets.token_hex(16)
    hash_obj = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}:{hash_obj.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = password_hash.split(":")
    except ValueError:
        return False
    hash_obj = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return hmac.compare_digest(hash_obj.hex(), stored_hash)


class AccountService:
    """Registration, login and profile management."""

    def __init__(self, db: Database, session_hours: int = 168):
        self.db = db
        self.session_hours = session_hours

    def has_registered_user(self) -> bool:
        return self.db.count_users() > 0

    def register(self, email: str, password: str, name: Optional[str] = None) -> User:
        """Create an account and its profile."""
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValueError("Invalid email format")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if self.db.get_user_by_email(email):
            raise ValueError("Email already registered")

        user = User(email=email, password_hash=hash_password(password))
        self.db.insert_user(user)
        self.db.save_profile(Profile(id=user.id, name=(name or "").strip() or email.split("@")[0]))

        logger.info(f"Registered user {user.id}")
        return user

    def login(self, email: str, password: str) -> Optional[Tuple[User, Session]]:
        """Authenticate and open a session. Returns None on bad credentials."""
        user = self.db.get_user_by_email((email or "").strip().lower())
        if not user or not verify_password(password or "", user.password_hash):
            logger.info("Failed login attempt")
            return None

        now = utcnow()
        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(hours=self.session_hours),
        )
        self.db.insert_session(session)
        self.db.delete_expired_sessions(now)
        return user, session

    def get_user_for_token(self, token: str) -> Optional[User]:
        """Resolve a bearer token to its user, ignoring expired sessions."""
        if not token:
            return None
        session = self.db.get_session(token)
        if not session:
            return None
        if session.is_expired:
            self.db.delete_session(token)
            return None
        return self.db.get_user(session.user_id)

    def sign_out(self, token: str) -> bool:
        return self.db.delete_session(token)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> bool:
        user = self.db.get_user(user_id)
        if not user or not verify_password(current_password, user.password_hash):
            return False
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        self.db.update_password(user_id, hash_password(new_password))
        return True

    def get_profile(self, user_id: str) -> Optional[Profile]:
        """Get a profile, creating it from the email when missing."""
        profile = self.db.get_profile(user_id)
        if profile:
            return profile

        user = self.db.get_user(user_id)
        if not user:
            return None
        profile = Profile(id=user.id, name=user.email.split("@")[0])
        self.db.save_profile(profile)
        return profile

    def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Optional[Profile]:
        profile = self.get_profile(user_id)
        if not profile:
            return None
        if name is not None:
            name = name.strip()
            if not name:
                raise ValueError("Name cannot be empty")
            profile.name = name[:100]
        if avatar_url is not None:
            profile.avatar_url = avatar_url or None
        profile.updated_at = utcnow()
        self.db.save_profile(profile)
        return profile
