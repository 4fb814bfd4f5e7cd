"""
Models / game.py
Rôle:
- Définir les entités persistées (Pydantic) : Game, GamePlayerConfig, UserGuess.
- Définir les options de partie (GameOptions / HintOptions) et la config de stats sérialisée.

Champs:
- Game: id, title, creator_id (None = invité), created_at (ISO UTC).
- GamePlayerConfig: id, game_id, player_id (athlète à deviner), stats_config, game_options.
- UserGuess: id, game_id, user_id, guess (id d'athlète proposé), is_correct, created_at.

Notes:
- `game_options` est persisté avec les clés front (`maxGuesses`, `hint.enabled`, `hint.text`).
- Les entités ne sont jamais modifiées après création.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from statguess.config.settings import settings


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid4())


class SelectionStateModel(BaseModel):
    selected: List[str] = Field(default_factory=list)
    deselected: List[str] = Field(default_factory=list)


class StatsConfigModel(BaseModel):
    info: SelectionStateModel = Field(default_factory=SelectionStateModel)
    hitting: SelectionStateModel = Field(default_factory=SelectionStateModel)
    pitching: SelectionStateModel = Field(default_factory=SelectionStateModel)


class HintOptions(BaseModel):
    enabled: bool = False
    text: str = ""


class GameOptions(BaseModel):
    """Options choisies par le créateur (nombre d'essais, indice optionnel)."""
    model_config = ConfigDict(populate_by_name=True)

    max_guesses: int = Field(default_factory=lambda: settings.DEFAULT_MAX_GUESSES, alias="maxGuesses")
    hint: HintOptions = Field(default_factory=HintOptions)

    @field_validator("max_guesses")
    @classmethod
    def _bounded(cls, value: int) -> int:
        if value < 1 or value > settings.MAX_GUESSES_LIMIT:
            raise ValueError(f"maxGuesses must be between 1 and {settings.MAX_GUESSES_LIMIT}")
        return value

    @property
    def hint_text(self) -> Optional[str]:
        """Texte d'indice exposé aux joueurs (None si désactivé ou vide)."""
        text = self.hint.text.strip()
        return text if self.hint.enabled and text else None


class Game(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    creator_id: Optional[str] = None
    created_at: str = Field(default_factory=_now_iso)


class GamePlayerConfig(BaseModel):
    id: str = Field(default_factory=_new_id)
    game_id: str
    player_id: int
    stats_config: StatsConfigModel = Field(default_factory=StatsConfigModel)
    game_options: GameOptions = Field(default_factory=GameOptions)


class UserGuess(BaseModel):
    id: str = Field(default_factory=_new_id)
    game_id: str
    user_id: str
    guess: str
    is_correct: bool = False
    created_at: str = Field(default_factory=_now_iso)


def dump(model: BaseModel) -> Dict:
    """Sérialisation JSON-compatible (clés front pour les options)."""
    return model.model_dump(mode="json", by_alias=True)
