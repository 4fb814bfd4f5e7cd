"""
Module routes/auth.py
Rôle:
- Inscription, connexion et déconnexion des utilisateurs (créateurs / joueurs identifiés).
- Les invités n'ont besoin d'aucun de ces endpoints.

Intégrations:
- UserStore (identity): comptes + sessions persistés (users.json).
- Cookie HttpOnly `statguess_session` posé au login (le token est aussi renvoyé pour un usage Bearer).

Garde-fous:
- Email unique (insensible à la casse / espaces), mot de passe ≥ 6 caractères.
- 400 sur inscription invalide, 401 sur identifiants invalides.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from statguess.config.settings import settings
from statguess.deps.auth import SESSION_COOKIE_NAME, session_token, user_required
from statguess.services.identity import IdentityError, User, UserStore, get_user_store

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------- Modèles ----------
class RegisterIn(BaseModel):
    email: str
    password: str
    display_name: Optional[str] = None


class LoginIn(BaseModel):
    email: str
    password: str


# ---------- Routes ----------
@router.post("/register")
def register(payload: RegisterIn, users: UserStore = Depends(get_user_store)):
    try:
        user = users.register(payload.email, payload.password, payload.display_name)
    except IdentityError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True, "user": user.model_dump()}


@router.post("/login")
def login(payload: LoginIn, response: Response, users: UserStore = Depends(get_user_store)):
    try:
        user, token = users.login(payload.email, payload.password)
    except IdentityError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=settings.USER_SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return {"ok": True, "user": user.model_dump(), "token": token}


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(session_token),
    users: UserStore = Depends(get_user_store),
):
    users.logout(token)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"ok": True}


@router.get("/me")
def me(user: User = Depends(user_required)):
    return {"user": user.model_dump()}
