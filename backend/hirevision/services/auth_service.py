import time
import uuid

from sqlalchemy import text
from sqlalchemy.orm import Session

from hirevision.config import settings
from hirevision.models.organization import Organization
from hirevision.models.user import User
from hirevision.utils.security import (
    generate_state,
    generate_token,
    hash_password,
    verify_password,
)
from hirevision.utils.timestamps import utc_now

SSO_STATE_TTL_SECONDS = 600
# Never claimed by an organization, so their users are not auto-joined
PUBLIC_EMAIL_DOMAINS = {
    "gmail.com", "googlemail.com", "outlook.com", "hotmail.com", "live.com",
    "yahoo.com", "icloud.com", "proton.me", "protonmail.com", "aol.com",
}


class AuthError(Exception):
    pass


def find_organization_for_email(db: Session, email: str) -> Organization | None:
    """Organization that claims the email's domain, if any."""
    domain = email.rsplit("@", 1)[-1].lower()
    for org in db.query(Organization).order_by(Organization.created_at).all():
        if domain in (org.domains or []):
            return org
    return None


class AuthService:
    def __init__(self):
        self._sessions: dict[str, tuple[str, float]] = {}  # token -> (user_id, expires_at)
        self._sso_states: dict[str, float] = {}  # state -> expires_at

    def _cleanup_expired(self):
        now = time.time()
        self._sessions = {
            t: (uid, exp) for t, (uid, exp) in self._sessions.items() if exp > now
        }
        self._sso_states = {s: exp for s, exp in self._sso_states.items() if exp > now}

    def register(
        self,
        db: Session,
        email: str,
        password: str,
        display_name: str,
        role: str,
        organization_name: str | None = None,
    ) -> User:
        email = email.strip().lower()
        if db.query(User).filter_by(email=email).first():
            raise AuthError("An account with this email already exists")

        now = utc_now()
        org_id = None
        if organization_name and role == "Recruiter":
            domain = email.split("@", 1)[-1]
            org = Organization(
                id=str(uuid.uuid4()),
                name=organization_name,
                domains=[] if domain in PUBLIC_EMAIL_DOMAINS else [domain],
                created_at=now,
            )
            db.add(org)
            db.flush()
            org_id = org.id
        elif role in ("Recruiter", "Interviewer"):
            # Hiring-team members join the organization that owns their email domain
            org = find_organization_for_email(db, email)
            org_id = org.id if org else None

        user = User(
            id=str(uuid.uuid4()),
            email=email,
            display_name=display_name,
            role=role,
            organization_id=org_id,
            password_hash=hash_password(password),
            skills=[],
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def login(self, db: Session, email: str, password: str) -> dict | None:
        email = email.strip().lower()
        throttle_key = f"login:{email}"
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            return {"error": "too_many_attempts", "retry_after_seconds": delay}

        user = db.query(User).filter_by(email=email).first()
        if not user or not user.password_hash or not verify_password(user.password_hash, password):
            self._record_failed_attempt(db, throttle_key)
            return None

        self._reset_failed_attempts(db, throttle_key)
        return self.issue_token(user.id)

    def sso_login(self, db: Session, profile: dict, provider: str = "workos") -> tuple[User, dict]:
        """Find or create the user behind an SSO profile and open a session."""
        email = profile["email"].strip().lower()
        user = None
        if profile.get("id"):
            user = db.query(User).filter_by(sso_provider=provider, sso_id=profile["id"]).first()
        if user is None:
            user = db.query(User).filter_by(email=email).first()

        now = utc_now()
        if user is None:
            name = " ".join(p for p in (profile.get("first_name"), profile.get("last_name")) if p)
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                display_name=name or email.split("@", 1)[0],
                role="Candidate",
                skills=[],
                created_at=now,
                updated_at=now,
            )
            db.add(user)
        user.sso_provider = provider
        user.sso_id = profile.get("id")
        user.updated_at = now
        db.commit()
        db.refresh(user)
        return user, self.issue_token(user.id)

    def issue_token(self, user_id: str) -> dict:
        token = generate_token()
        self._sessions[token] = (user_id, time.time() + settings.session_ttl_seconds)
        return {
            "token": token,
            "user_id": user_id,
            "expires_in_seconds": settings.session_ttl_seconds,
        }

    def logout(self, token: str):
        self._sessions.pop(token, None)

    def resolve_token(self, token: str) -> str | None:
        self._cleanup_expired()
        entry = self._sessions.get(token)
        if entry is None:
            return None
        user_id, _ = entry
        # Sliding expiry: every authenticated request extends the session.
        self._sessions[token] = (user_id, time.time() + settings.session_ttl_seconds)
        return user_id

    def issue_sso_state(self) -> str:
        self._cleanup_expired()
        state = generate_state()
        self._sso_states[state] = time.time() + SSO_STATE_TTL_SECONDS
        return state

    def consume_sso_state(self, state: str | None) -> bool:
        """Single use: a state is valid for exactly one callback."""
        self._cleanup_expired()
        if not state:
            return False
        return self._sso_states.pop(state, None) is not None

    def clear(self):
        self._sessions.clear()
        self._sso_states.clear()

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        remaining = delay - (time.time() - last_failed_at)
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        now = time.time()
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": now},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 0, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = 0,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()


auth_service = AuthService()
