import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.config import settings
from jobtracker.models.user import User
from jobtracker.services.job_store import guest_storage
from jobtracker.utils.security import (
    generate_guest_id,
    generate_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger("jobtracker.sessions")


@dataclass(frozen=True)
class OwnerContext:
    """Who a request acts for. Exactly one of ``user_id``/``guest_id`` is set."""

    email: str
    user_id: str | None = None
    guest_id: str | None = None

    @property
    def is_guest(self) -> bool:
        return self.email == settings.guest_email


@dataclass
class _ActiveSession:
    owner: OwnerContext
    expires_at: float


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SessionService:
    def __init__(self):
        self._sessions: dict[str, _ActiveSession] = {}  # token -> session

    def _end(self, token: str):
        active = self._sessions.pop(token, None)
        if active and active.owner.guest_id:
            guest_storage.discard(active.owner.guest_id)
            logger.info("Guest session %s ended; session jobs discarded.", active.owner.guest_id)

    def _cleanup_expired(self):
        now = time.time()
        for token in [t for t, s in self._sessions.items() if s.expires_at <= now]:
            self._end(token)

    def _issue(self, owner: OwnerContext) -> dict:
        token = generate_token()
        ttl = settings.session_ttl_seconds
        self._sessions[token] = _ActiveSession(owner=owner, expires_at=time.time() + ttl)
        return {"token": token, "expires_in_seconds": ttl, "is_guest": owner.is_guest}

    def find_user(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def register(self, db: Session, email: str, password: str) -> User | None:
        """Create an account, or return None if the email is already taken."""
        now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        user = User(
            id=str(uuid.uuid4()),
            email=normalize_email(email),
            password_hash=hash_password(password),
            created_at=now,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Registration for an existing email rejected")
            return None
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, db: Session, email: str, password: str) -> dict | None:
        user = self.find_user(db, email)
        if not user or not verify_password(user.password_hash, password):
            return None
        return self._issue(OwnerContext(email=user.email, user_id=user.id))

    def start_guest(self) -> dict:
        guest_id = generate_guest_id()
        guest_storage.open(guest_id)
        return self._issue(OwnerContext(email=settings.guest_email, guest_id=guest_id))

    def resolve(self, token: str) -> OwnerContext | None:
        self._cleanup_expired()
        active = self._sessions.get(token)
        if active is None:
            return None
        active.expires_at = time.time() + settings.session_ttl_seconds
        return active.owner

    def logout(self, token: str):
        self._end(token)

    def clear(self):
        for token in list(self._sessions):
            self._end(token)


session_service = SessionService()
