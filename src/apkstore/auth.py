from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import settings
from .errors import AuthError
from .models import AuthUser, Profile


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SIGNED_IN = "SIGNED_IN"
SIGNED_UP = "SIGNED_UP"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, "Profile | None"], None]

_listeners: list[AuthListener] = []


def subscribe(listener: AuthListener) -> Callable[[], None]:
    """Register a session-change listener; returns a callable that removes it."""
    _listeners.append(listener)

    def unsubscribe() -> None:
        if listener in _listeners:
            _listeners.remove(listener)

    return unsubscribe


def _notify(event: str, profile: Profile | None) -> None:
    for listener in list(_listeners):
        try:
            listener(event, profile)
        except Exception:
            logger.exception("Auth listener %r failed on %s", listener, event)


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, password_hash: str) -> bool:
    return pwd_context.verify(plain, password_hash)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def sign_up(db: Session, email: str, password: str, username: str) -> Profile:
    email = _normalize_email(email)
    if db.query(AuthUser).filter(AuthUser.email == email).first():
        raise AuthError("User already registered")

    user = AuthUser(email=email, password_hash=hash_password(password))
    db.add(user)
    db.flush()

    profile = Profile(id=user.id, email=email, username=username.strip(), is_admin=False)
    db.add(profile)
    db.commit()

    _notify(SIGNED_UP, profile)
    return profile


def sign_in(db: Session, email: str, password: str) -> Profile:
    user = db.query(AuthUser).filter(AuthUser.email == _normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Invalid login credentials")

    profile = db.query(Profile).filter(Profile.id == user.id).first()
    if not profile:
        raise AuthError("Profile not found for this account")

    user.last_sign_in_at = _utcnow()
    db.commit()

    _notify(SIGNED_IN, profile)
    return profile


def start_session(session_data: dict, profile: Profile) -> None:
    session_data["user_id"] = profile.id
    session_data["last_seen"] = int(time.time())


def sign_out(session_data: dict, profile: Profile | None = None) -> None:
    session_data.clear()
    _notify(SIGNED_OUT, profile)


def get_session_user(db: Session, session_data: dict) -> Profile | None:
    user_id = session_data.get("user_id")
    last_seen = session_data.get("last_seen")
    if not user_id or not last_seen:
        return None

    now_ts = int(time.time())
    if now_ts - int(last_seen) > settings.session_max_age_seconds:
        return None

    session_data["last_seen"] = now_ts
    return db.query(Profile).filter(Profile.id == str(user_id)).first()


def is_user_admin(db: Session, user_id: str) -> bool:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    return bool(profile and profile.is_admin)


def provision_admin(db: Session, email: str, password: str, username: str) -> Profile:
    """Create the account if needed and set its admin flag."""
    email = _normalize_email(email)
    user = db.query(AuthUser).filter(AuthUser.email == email).first()
    if user:
        user.password_hash = hash_password(password)
        profile = db.query(Profile).filter(Profile.id == user.id).first()
        if not profile:
            profile = Profile(id=user.id, email=email, username=username)
            db.add(profile)
    else:
        user = AuthUser(email=email, password_hash=hash_password(password))
        db.add(user)
        db.flush()
        profile = Profile(id=user.id, email=email, username=username)
        db.add(profile)

    profile.is_admin = True
    db.commit()
    return profile


def bootstrap_admin_if_needed(db: Session) -> None:
    if not settings.auto_bootstrap_admin:
        return

    exists = db.query(Profile).filter(Profile.is_admin.is_(True)).first()
    if exists:
        return

    provision_admin(db, settings.admin_email, settings.admin_password, settings.admin_username)
    logger.info("Bootstrapped admin account %s", settings.admin_email)


def log_auth_event(event: str, profile: Profile | None) -> None:
    if profile is None:
        logger.info("Auth event %s", event)
    else:
        logger.info("Auth event %s for %s", event, profile.email)
