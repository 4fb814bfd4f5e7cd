"""
Service: game_store.py
Rôle:
- Persistance des parties (Game + GamePlayerConfig) et des propositions (UserGuess).

Données persistées (sous DATA_DIR):
- games.json     : {"games": {id: Game}, "configs": {id: GamePlayerConfig}} (écriture atomique)
- guesses.ndjson : journal append-only, une UserGuess par ligne

API:
- STORE.create_game(title, creator_id, player_id, stats_config, game_options) → (Game, Config)
- STORE.get_game(game_id) / STORE.get_config(game_id)
- STORE.create_guess(game_id, user_id, guess, is_correct) → UserGuess (validation des champs)
- STORE.list_guesses(game_id, user_id=None) → [UserGuess] (ordre d'insertion)

Erreurs:
- `PersistenceError` pour toute validation / référence invalide ; aucune écriture partielle.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
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
from .io_utils import append_ndjson, read_json, read_ndjson, write_json

logger = logging.getLogger(__name__)

GAMES_FILENAME = "games.json"
GUESSES_FILENAME = "guesses.ndjson"


class PersistenceError(RuntimeError):
    """Erreur de validation ou d'écriture côté persistance."""


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class GameStore:
    data_dir: Path
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    games: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    configs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    guesses: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def lock(self) -> RLock:
        """Verrou du store (réentrant) pour composer lecture + écriture."""
        return self._lock

    @property
    def games_path(self) -> Path:
        return self.data_dir / GAMES_FILENAME

    @property
    def guesses_path(self) -> Path:
        return self.data_dir / GUESSES_FILENAME

    def load(self) -> None:
        """Charge parties + journal des propositions (tolérant aux fichiers absents)."""
        with self._lock:
            data = read_json(self.games_path) or {}
            self.games = data.get("games", {})
            self.configs = data.get("configs", {})
            self.guesses = read_ndjson(self.guesses_path)

    def _save_games(self, games: Dict[str, Any], configs: Dict[str, Any]) -> None:
        try:
            write_json(self.games_path, {"games": games, "configs": configs})
        except OSError as exc:
            raise PersistenceError(f"Could not save game: {exc}") from exc

    # -----------------------------
    # Parties
    # -----------------------------
    def create_game(
        self,
        *,
        title: str,
        player_id: int,
        creator_id: Optional[str] = None,
        stats_config: Optional[StatsConfigModel] = None,
        game_options: Optional[GameOptions] = None,
    ) -> Tuple[Game, GamePlayerConfig]:
        """Crée la partie et sa configuration en une seule écriture."""
        if _missing(title):
            raise PersistenceError("title is required")
        if not player_id:
            raise PersistenceError("player_id is required")
        game = Game(title=title.strip(), creator_id=creator_id)
        config = GamePlayerConfig(
            game_id=game.id,
            player_id=int(player_id),
            stats_config=stats_config or StatsConfigModel(),
            game_options=game_options or GameOptions(),
        )
        with self._lock:
            games = dict(self.games)
            configs = dict(self.configs)
            games[game.id] = dump(game)
            configs[config.id] = dump(config)
            self._save_games(games, configs)
            self.games, self.configs = games, configs
        logger.info("Game created", extra={"game_id": game.id, "athlete_id": config.player_id})
        return game, config

    def get_game(self, game_id: str) -> Optional[Game]:
        with self._lock:
            raw = self.games.get(game_id or "")
        return Game.model_validate(raw) if raw else None

    def get_config(self, game_id: str) -> Optional[GamePlayerConfig]:
        with self._lock:
            raw = next((c for c in self.configs.values() if c.get("game_id") == game_id), None)
        return GamePlayerConfig.model_validate(raw) if raw else None

    def list_games(self, creator_id: Optional[str] = None) -> List[Game]:
        with self._lock:
            rows = [g for g in self.games.values() if creator_id is None or g.get("creator_id") == creator_id]
        rows.sort(key=lambda g: g.get("created_at") or "", reverse=True)
        return [Game.model_validate(g) for g in rows]

    # -----------------------------
    # Propositions
    # -----------------------------
    def create_guess(
        self,
        game_id: Optional[str],
        user_id: Optional[str],
        guess: Any,
        is_correct: Optional[bool] = False,
    ) -> UserGuess:
        """Enregistre une proposition ; `is_correct` est calculé par l'appelant."""
        if _missing(game_id) or _missing(user_id) or _missing(guess):
            raise PersistenceError("game_id, user_id and guess are required")
        with self._lock:
            if game_id not in self.games:
                raise PersistenceError(f"Game {game_id} not found")
            record = UserGuess(
                game_id=str(game_id),
                user_id=str(user_id),
                guess=str(guess).strip(),
                is_correct=bool(is_correct),
            )
            payload = dump(record)
            try:
                append_ndjson(self.guesses_path, payload)
            except OSError as exc:
                raise PersistenceError(f"Could not save guess: {exc}") from exc
            self.guesses.append(payload)
        logger.info(
            "Guess recorded",
            extra={"game_id": record.game_id, "user_id": record.user_id, "is_correct": record.is_correct},
        )
        return record

    def list_guesses(self, game_id: Optional[str], user_id: Optional[str] = None) -> List[UserGuess]:
        if _missing(game_id):
            raise PersistenceError("game_id is required")
        with self._lock:
            rows = [
                g for g in self.guesses
                if g.get("game_id") == game_id and (user_id is None or g.get("user_id") == user_id)
            ]
        return [UserGuess.model_validate(g) for g in rows]


STORE = GameStore(Path(settings.DATA_DIR))
STORE.load()


def get_game_store() -> GameStore:
    """Dépendance FastAPI (surchargée dans les tests)."""
    return STORE
