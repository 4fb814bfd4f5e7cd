"""
Module routes/games.py
Rôle:
- Création d'une partie (config de stats + options) et génération du lien partageable.
- Lecture d'une partie, vue joueur (stats restreintes) et soumission d'une proposition
  vérifiée côté serveur.

Intégrations:
- GameStore (game_store): persistance Game / GamePlayerConfig / UserGuess.
- game_service: règles (essais max, correction, bascule en mode display en fin de partie).
- current_user: créateur / joueur identifié si connecté, sinon invité.

Endpoints:
- POST /api/games                 → 201 {game, config, link}
- GET  /api/games/mine            → parties créées par l'utilisateur connecté
- GET  /api/games/{game_id}       → {game, config}
- GET  /api/games/{game_id}/play  → vue joueur (+ progression, indice)
- POST /api/games/{game_id}/guess → 201 {guess, status, ...} ; 409 si partie terminée
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from statguess.deps.auth import current_user, user_required
from statguess.models.game import GameOptions, StatsConfigModel, dump
from statguess.services.game_service import (
    GameNotFoundError,
    GuessRejectedError,
    build_play_view,
    create_game,
    load_game,
    share_link,
    submit_guess,
)
from statguess.services.game_store import GameStore, PersistenceError, get_game_store
from statguess.services.identity import User
from statguess.services.stats_client import StatsClient, StatsProviderError, get_stats_client

router = APIRouter(prefix="/api/games", tags=["games"])


class GameCreatePayload(BaseModel):
    title: Optional[str] = Field(None, description="Titre (défaut: 'Game for <nom>')")
    creator_id: Optional[str] = Field(None, description="Créateur invité (ignoré si une session est ouverte)")
    player_id: Optional[int] = Field(None, description="Athlète à deviner")
    stats_config: StatsConfigModel = Field(default_factory=StatsConfigModel)
    game_options: GameOptions = Field(default_factory=GameOptions)


class PlayGuessPayload(BaseModel):
    user_id: Optional[str] = Field(None, description="Joueur (défaut: utilisateur connecté)")
    guess: str | int = Field(..., description="Identifiant de l'athlète proposé")


@router.post("")
def create_game_route(
    payload: GameCreatePayload,
    user: Optional[User] = Depends(current_user),
    store: GameStore = Depends(get_game_store),
    stats: StatsClient = Depends(get_stats_client),
):
    """Persiste la configuration et renvoie le lien `<PUBLIC_BASE_URL>/game/<id>`."""
    if not payload.player_id:
        raise HTTPException(status_code=400, detail="player_id is required")
    try:
        result = create_game(
            store,
            player_id=payload.player_id,
            stats_config=payload.stats_config,
            game_options=payload.game_options,
            title=payload.title,
            creator_id=user.id if user else payload.creator_id,
            stats=stats,
        )
    except PersistenceError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse(status_code=201, content=result)


@router.get("/mine")
def my_games(user: User = Depends(user_required), store: GameStore = Depends(get_game_store)):
    """Parties créées par l'utilisateur connecté (plus récentes d'abord)."""
    games = store.list_games(creator_id=user.id)
    return {"games": [{**dump(g), "link": share_link(g.id)} for g in games]}


@router.get("/{game_id}")
def get_game(game_id: str, store: GameStore = Depends(get_game_store)):
    try:
        game, config = load_game(store, game_id)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"game": dump(game), "config": dump(config), "link": share_link(game.id)}


@router.get("/{game_id}/play")
def play_view(
    game_id: str,
    user_id: Optional[str] = Query(default=None, description="Joueur (invité)"),
    user: Optional[User] = Depends(current_user),
    store: GameStore = Depends(get_game_store),
    stats: StatsClient = Depends(get_stats_client),
):
    """Stats partiellement révélées + progression du joueur."""
    try:
        return build_play_view(store, stats, game_id, user_id or (user.id if user else None))
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StatsProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.post("/{game_id}/guess")
def play_guess(
    game_id: str,
    payload: PlayGuessPayload,
    user: Optional[User] = Depends(current_user),
    store: GameStore = Depends(get_game_store),
):
    """Proposition vérifiée côté serveur (id d'athlète), essais limités."""
    try:
        result = submit_guess(store, game_id, payload.user_id or (user.id if user else None), payload.guess)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except GuessRejectedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse(status_code=201, content=result)
