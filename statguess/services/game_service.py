"""
Service: game_service.py
Rôle:
- Orchestration "métier" autour du store : création de partie + lien partageable,
  vue joueur (stats partiellement révélées), soumission d'une proposition.

Règles:
- Une proposition est correcte si l'id d'athlète proposé == id de l'athlète de la partie.
- Un joueur dispose de `maxGuesses` essais ; après une bonne réponse ou le dernier essai,
  la partie est terminée pour lui (409 côté route) et la vue passe en mode "display"
  (identité révélée).
- L'indice n'est exposé que s'il est activé et non vide.
- Tant que la partie est en cours, le titre n'est pas exposé (il peut nommer l'athlète).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from statguess.config.settings import settings
from statguess.models.game import (
    Game,
    GameOptions,
    GamePlayerConfig,
    StatsConfigModel,
    UserGuess,
    dump,
)
from .game_store import GameStore
from .stat_view import build_player_view
from .stats_client import StatsClient, StatsProviderError
from .visibility import DISPLAY, RESTRICTED, StatsConfig

logger = logging.getLogger(__name__)

STATUS_PLAYING = "playing"
STATUS_SOLVED = "solved"
STATUS_FAILED = "failed"


class GameNotFoundError(LookupError):
    """Partie inconnue."""


class GuessRejectedError(ValueError):
    """Proposition refusée (partie terminée pour ce joueur)."""


def share_link(game_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/game/{game_id}"


def default_title(player_id: int, stats: Optional[StatsClient]) -> str:
    """`Game for <nom>` si l'athlète est résolu, sinon `Game for player <id>`."""
    if stats is not None:
        try:
            return f"Game for {stats.fetch_player_data(player_id).full_name}"
        except StatsProviderError:
            logger.warning("Could not resolve player name for title", extra={"athlete_id": player_id})
    return f"Game for player {player_id}"


def create_game(
    store: GameStore,
    *,
    player_id: Optional[int],
    stats_config: Optional[StatsConfigModel] = None,
    game_options: Optional[GameOptions] = None,
    title: Optional[str] = None,
    creator_id: Optional[str] = None,
    stats: Optional[StatsClient] = None,
) -> Dict[str, Any]:
    """Persiste la partie et retourne {game, config, link}."""
    if not player_id:
        raise ValueError("No player ID provided")
    resolved_title = (title or "").strip() or default_title(player_id, stats)
    game, config = store.create_game(
        title=resolved_title,
        player_id=player_id,
        creator_id=creator_id,
        stats_config=stats_config,
        game_options=game_options,
    )
    return {"game": dump(game), "config": dump(config), "link": share_link(game.id)}


def load_game(store: GameStore, game_id: str) -> Tuple[Game, GamePlayerConfig]:
    game = store.get_game(game_id)
    config = store.get_config(game_id) if game else None
    if game is None or config is None:
        raise GameNotFoundError(f"Game {game_id} not found")
    return game, config


def is_correct_guess(config: GamePlayerConfig, guess: Any) -> bool:
    return str(guess).strip() == str(config.player_id)


def player_status(config: GamePlayerConfig, guesses: List[UserGuess]) -> Dict[str, Any]:
    """Progression d'un joueur : essais utilisés / restants et état de la partie."""
    max_guesses = config.game_options.max_guesses
    used = len(guesses)
    if any(g.is_correct for g in guesses):
        status = STATUS_SOLVED
    elif used >= max_guesses:
        status = STATUS_FAILED
    else:
        status = STATUS_PLAYING
    return {
        "status": status,
        "maxGuesses": max_guesses,
        "guessesUsed": used,
        "guessesRemaining": max(0, max_guesses - used) if status == STATUS_PLAYING else 0,
    }


def submit_guess(store: GameStore, game_id: str, user_id: Optional[str], guess: Any) -> Dict[str, Any]:
    """Vérifie, enregistre et retourne la proposition + la progression mise à jour."""
    _, config = load_game(store, game_id)
    # contrôle du quota + ajout sous le même verrou (requêtes concurrentes d'un même joueur)
    with store.lock:
        previous = store.list_guesses(game_id, user_id=user_id) if user_id else []
        if player_status(config, previous)["status"] != STATUS_PLAYING:
            raise GuessRejectedError("No guesses left for this game")

        correct = is_correct_guess(config, guess) if guess is not None else False
        record = store.create_guess(game_id, user_id, guess, correct)
    progress = player_status(config, previous + [record])
    return {"guess": dump(record), **progress}


def build_play_view(
    store: GameStore,
    stats: StatsClient,
    game_id: str,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Vue joueur : stats restreintes tant que la partie est en cours, complètes ensuite."""
    game, config = load_game(store, game_id)
    guesses = store.list_guesses(game_id, user_id=user_id) if user_id else []
    progress = player_status(config, guesses)
    mode = RESTRICTED if progress["status"] == STATUS_PLAYING else DISPLAY

    player = stats.fetch_player_data(config.player_id)
    view = build_player_view(player, StatsConfig.from_dict(config.stats_config.model_dump()), mode)
    view.update(progress)
    game_payload = dump(game)
    if mode == RESTRICTED:
        # le titre par défaut contient le nom de l'athlète
        game_payload["title"] = None
    view["game"] = game_payload
    view["hint"] = config.game_options.hint_text
    view["guesses"] = [dump(g) for g in guesses]
    return view
