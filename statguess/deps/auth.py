"""
Dépendances d'authentification utilisateur
==========================================

Objectif
--------
Fournir l'utilisateur courant aux routes via:
1) un **Bearer token** (pratique en dev/CLI), *ou*
2) un **cookie de session HttpOnly** (`statguess_session`, posé par /auth/login).

API exposée ici
---------------
- `current_user` : dependency optionnelle → `User` ou `None` (invité).
- `user_required` : dependency stricte → 401 si aucun utilisateur valide.
- `session_token(request, credentials)` : extrait le token (cookie prioritaire).

Notes
-----
- `HTTPBearer(auto_error=False)` pour laisser passer les invités et rendre nos propres 401.
- Créer une partie ou deviner reste possible en invité (créateur `None`, user_id côté front).
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from statguess.services.identity import User, UserStore, get_user_store

SESSION_COOKIE_NAME = "statguess_session"

# Schéma Bearer (désactive l'erreur auto pour autoriser les invités)
bearer = HTTPBearer(auto_error=False)


def session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[str]:
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if cookie:
        return cookie
    if credentials and (credentials.scheme or "").lower() == "bearer":
        return credentials.credentials
    return None


def current_user(
    token: Optional[str] = Depends(session_token),
    users: UserStore = Depends(get_user_store),
) -> Optional[User]:
    """Utilisateur connecté, ou None pour un invité."""
    return users.resolve(token)


def user_required(user: Optional[User] = Depends(current_user)) -> User:
    """Refuse l'accès (401) sans session valide."""
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user
