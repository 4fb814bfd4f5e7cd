"""
Draft store registry
====================

Sessions de création ("brouillons") tenues en mémoire jusqu'à publication.
Chaque brouillon possède sa propre `StatsConfig`, ses `GameOptions`, les données du joueur
chargées une fois, et un `RevealTracker` par namespace (surlignage des clés révélées).

Concurrence:
- Les chargements de stats d'un même brouillon sont sérialisés (`asyncio.Lock`) et
  l'initialisation du moteur est idempotente : une réponse lente qui arrive après une rapide
  ne réinitialise pas la partition.
- Les appels réseau (bloquants) passent par `anyio.to_thread.run_sync`.

Durée de vie:
- Un brouillon inactif depuis plus de `DRAFT_TTL_SECONDS` est purgé (timers annulés) à la
  prochaine création ou lecture d'un brouillon.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set
from uuid import uuid4

import anyio

from statguess.config.settings import settings
from statguess.models.game import GameOptions, StatsConfigModel, dump
from .game_service import create_game
from .game_store import GameStore
from .reveal_tracker import RevealTracker
from .stat_mappings import NAMESPACES
from .stat_view import build_player_view
from .stats_client import PlayerData, StatsClient
from .visibility import AUTHOR, StatsConfig, full_key_set, initialize, toggle, toggle_all

logger = logging.getLogger(__name__)


def _trackers() -> Dict[str, RevealTracker]:
    return {ns: RevealTracker() for ns in NAMESPACES}


@dataclass
class Draft:
    player_id: int
    draft_id: str = field(default_factory=lambda: uuid4().hex)
    config: StatsConfig = field(default_factory=StatsConfig)
    options: GameOptions = field(default_factory=GameOptions)
    player: Optional[PlayerData] = None
    trackers: Dict[str, RevealTracker] = field(default_factory=_trackers, repr=False)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    last_seen: float = field(default_factory=time.monotonic, repr=False)

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def expired(self, now: float, ttl: float) -> bool:
        return now - self.last_seen > ttl

    def full_keys(self, namespace: str) -> List[str]:
        if self.player is None:
            return []
        return full_key_set(namespace, self.player.records(namespace))

    def apply_player(self, player: PlayerData) -> None:
        """Mémorise les données et applique la politique par défaut (si jamais configuré)."""
        self.player = player
        for ns in NAMESPACES:
            state = initialize(self.config.get(ns), self.full_keys(ns), ns)
            self.config = self.config.with_namespace(ns, state)
            self.trackers[ns].prime(state.selected)

    def toggle(self, namespace: str, key: str) -> Set[str]:
        state = toggle(self.config.get(namespace), key, self.full_keys(namespace))
        self.config = self.config.with_namespace(namespace, state)
        return self.trackers[namespace].track(state.selected)

    def toggle_all(self, namespace: str, keys: Iterable[str]) -> Set[str]:
        state = toggle_all(self.config.get(namespace), self.full_keys(namespace), keys)
        self.config = self.config.with_namespace(namespace, state)
        return self.trackers[namespace].track(state.selected)

    def highlights(self) -> Dict[str, FrozenSet[str]]:
        return {ns: tracker.highlighted for ns, tracker in self.trackers.items()}

    def author_view(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "draftId": self.draft_id,
            "playerId": self.player_id,
            "statsConfig": self.config.to_dict(),
            "gameOptions": dump(self.options),
            "loaded": self.player is not None,
        }
        if self.player is not None:
            payload["view"] = build_player_view(self.player, self.config, AUTHOR, highlights=self.highlights())
        return payload

    async def close(self) -> None:
        for tracker in self.trackers.values():
            await tracker.aclose()

    def cancel_timers(self) -> None:
        for tracker in self.trackers.values():
            tracker.cancel()


_DRAFTS: Dict[str, Draft] = {}
_LOCK = RLock()


def purge_expired(now: Optional[float] = None) -> List[str]:
    """Retire les brouillons inactifs depuis plus de `DRAFT_TTL_SECONDS` (ids purgés)."""
    now = time.monotonic() if now is None else now
    ttl = settings.DRAFT_TTL_SECONDS
    with _LOCK:
        stale = [d for d in _DRAFTS.values() if d.expired(now, ttl)]
        for draft in stale:
            _DRAFTS.pop(draft.draft_id, None)
    for draft in stale:
        draft.cancel_timers()
    if stale:
        logger.info("Expired drafts purged", extra={"count": len(stale)})
    return [d.draft_id for d in stale]


async def load_draft(draft: Draft, stats: StatsClient) -> Draft:
    """Charge les stats du joueur puis initialise le moteur (sérialisé par brouillon)."""
    async with draft.lock:
        player = await anyio.to_thread.run_sync(stats.fetch_player_data, draft.player_id)
        draft.apply_player(player)
    return draft


async def create_draft(player_id: Optional[int], stats: StatsClient) -> Draft:
    """Ouvre une session de création pour un athlète (ValueError si aucun id)."""
    if not player_id:
        raise ValueError("No player ID provided")
    purge_expired()
    draft = Draft(player_id=int(player_id))
    await load_draft(draft, stats)
    with _LOCK:
        _DRAFTS[draft.draft_id] = draft
    logger.info("Draft created", extra={"draft_id": draft.draft_id, "athlete_id": draft.player_id})
    return draft


def get_draft(draft_id: str) -> Optional[Draft]:
    """Brouillon actif (None si inconnu ou expiré) ; l'accès prolonge sa durée de vie."""
    purge_expired()
    with _LOCK:
        draft = _DRAFTS.get(draft_id)
    if draft is not None:
        draft.touch()
    return draft


def list_draft_ids() -> List[str]:
    with _LOCK:
        return list(_DRAFTS.keys())


async def drop_draft(draft_id: str) -> bool:
    """Retire un brouillon du registre et annule ses timers de surlignage."""
    with _LOCK:
        draft = _DRAFTS.pop(draft_id, None)
    if draft is None:
        return False
    await draft.close()
    return True


async def publish_draft(
    draft: Draft,
    store: GameStore,
    *,
    title: Optional[str] = None,
    creator_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Persiste la configuration finale et ferme le brouillon."""
    if not (title or "").strip() and draft.player is not None:
        title = f"Game for {draft.player.full_name}"
    result = create_game(
        store,
        player_id=draft.player_id,
        stats_config=StatsConfigModel.model_validate(draft.config.to_dict()),
        game_options=draft.options,
        title=title,
        creator_id=creator_id,
    )
    await drop_draft(draft.draft_id)
    return result
