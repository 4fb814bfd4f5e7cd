"""
Service: identity.py
Rôle:
- Comptes utilisateurs (créateurs / joueurs identifiés) et sessions à durée limitée.
- Les invités n'ont pas de compte : ils jouent avec un identifiant fourni par le front.

Stockage:
- users.json : {"users": {user_id: {...}}, "sessions": {token: {"user_id", "exp"}}}

Sécurité:
- Mots de passe hachés en PBKDF2-SHA256 au format "pbkdf2$<iters>$<salt_b64>$<hash_b64>".
- Email unique (insensible à la casse / espaces).
- Une session expirée est supprimée à la lecture.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel

from statguess.config.settings import settings
from .io_utils import read_json, write_json

logger = logging.getLogger(__name__)

USERS_FILENAME = "users.json"
PBKDF2_ITERATIONS = 200_000


class IdentityError(ValueError):
    """Inscription / connexion refusée."""


class User(BaseModel):
    id: str
    email: str
    display_name: str
    created_at: str


def _now_ts() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def hash_password(pw: str, salt: bytes | None = None, iters: int = PBKDF2_ITERATIONS) -> str:
    salt = salt or os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8"), salt, iters)
    return "pbkdf2$%d$%s$%s" % (
        iters,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(dk).decode("ascii"),
    )


def verify_password(plain: str, hashed: str) -> bool:
    parts = (hashed or "").split("$")
    if len(parts) != 4 or parts[0] != "pbkdf2":
        return False
    try:
        iters = int(parts[1])
        salt = base64.b64decode(parts[2].encode("ascii"))
        expected = base64.b64decode(parts[3].encode("ascii"))
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain.encode("utf-8"), salt, iters)
    return hmac.compare_digest(dk, expected)


@dataclass
class UserStore:
    data_dir: Path
    session_ttl: int = field(default_factory=lambda: settings.USER_SESSION_TTL_SECONDS)
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    sessions: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def path(self) -> Path:
        return self.data_dir / USERS_FILENAME

    def load(self) -> None:
        with self._lock:
            data = read_json(self.path) or {}
            self.users = data.get("users", {})
            self.sessions = data.get("sessions", {})

    def save(self) -> None:
        with self._lock:
            write_json(self.path, {"users": self.users, "sessions": self.sessions})

    @staticmethod
    def _public(record: Dict[str, Any]) -> User:
        return User(
            id=record["id"],
            email=record["email"],
            display_name=record["display_name"],
            created_at=record["created_at"],
        )

    def _find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        target = email.strip().lower()
        return next((u for u in self.users.values() if u["email"] == target), None)

    def register(self, email: str, password: str, display_name: Optional[str] = None) -> User:
        email_norm = (email or "").strip().lower()
        if "@" not in email_norm:
            raise IdentityError("A valid email is required")
        if len(password or "") < 6:
            raise IdentityError("Password must be at least 6 characters")
        with self._lock:
            if self._find_by_email(email_norm):
                raise IdentityError("Email already registered")
            uid = str(uuid4())
            record = {
                "id": uid,
                "email": email_norm,
                "display_name": (display_name or "").strip() or email_norm.split("@")[0],
                "password_hash": hash_password(password),
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            self.users[uid] = record
            self.save()
        logger.info("User registered", extra={"user_id": uid})
        return self._public(record)

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Vérifie les identifiants et ouvre une session ; retourne (user, token)."""
        with self._lock:
            record = self._find_by_email(email or "")
            if not record or not verify_password(password or "", record.get("password_hash", "")):
                raise IdentityError("Invalid credentials")
            token = uuid4().hex
            self.sessions[token] = {"user_id": record["id"], "exp": _now_ts() + self.session_ttl}
            self.save()
        return self._public(record), token

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            if self.sessions.pop(token, None) is not None:
                self.save()

    def resolve(self, token: Optional[str]) -> Optional[User]:
        """Utilisateur d'une session valide (None si absente / expirée)."""
        if not token:
            return None
        with self._lock:
            rec = self.sessions.get(token)
            if not isinstance(rec, dict):
                return None
            if int(rec.get("exp", 0)) < _now_ts():
                self.sessions.pop(token, None)
                self.save()
                return None
            user = self.users.get(rec.get("user_id"))
        return self._public(user) if user else None


USERS = UserStore(Path(settings.DATA_DIR))
USERS.load()


def get_user_store() -> UserStore:
    """Dépendance FastAPI (surchargée dans les tests)."""
    return USERS
