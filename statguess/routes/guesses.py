"""
Module routes/guesses.py
Rôle:
- Enregistrement / lecture brute des propositions d'une partie.

Endpoints:
- POST /api/games/guesses           → 201 + enregistrement stocké, ou 400 {"error": ...}
- GET  /api/games/guesses?game_id=  → 200 + liste, ou 400 {"error": ...}
- autres méthodes                   → 405 (header Allow: POST, GET)

Remarques:
- `is_correct` est calculé par l'appelant (le front) et stocké tel quel.
- Ce routeur doit être monté AVANT `routes/games.py` (sinon /api/games/{game_id} capture "guesses").
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from statguess.models.game import dump
from statguess.services.game_store import GameStore, PersistenceError, get_game_store

router = APIRouter(prefix="/api/games", tags=["guesses"])

ALLOWED_METHODS = ["POST", "GET"]


class GuessPayload(BaseModel):
    game_id: Optional[str] = None
    user_id: Optional[str] = None
    guess: Optional[str | int] = None
    is_correct: bool = False


@router.post("/guesses")
def create_guess(payload: GuessPayload, store: GameStore = Depends(get_game_store)):
    """Stocke une proposition (validation game_id / user_id / guess côté store)."""
    try:
        record = store.create_guess(payload.game_id, payload.user_id, payload.guess, payload.is_correct)
    except PersistenceError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    return JSONResponse(status_code=201, content=dump(record))


@router.get("/guesses")
def list_guesses(
    game_id: Optional[str] = Query(default=None, description="Identifiant de partie"),
    store: GameStore = Depends(get_game_store),
):
    """Toutes les propositions d'une partie (ordre d'enregistrement)."""
    try:
        guesses = store.list_guesses(game_id)
    except PersistenceError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    return [dump(g) for g in guesses]


@router.api_route("/guesses", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
def guesses_method_not_allowed(request: Request):
    return PlainTextResponse(
        f"Method {request.method} Not Allowed",
        status_code=405,
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
    )
