"""
Service: reveal_tracker.py
Rôle:
- Suivre, pour un namespace, les clés nouvellement révélées (passées dans `selected`)
  et les exposer comme "surlignées" pendant une durée fixe (2 s par défaut).

Comportement:
- Premier appel à `track()` = amorçage : mémorise l'état sans rien surligner.
- Un nouveau reveal avant expiration annule le timer en cours et le relance
  (jamais d'empilement, jamais de double déclenchement).
- Le timer est une tâche asyncio : `track()` doit être appelé depuis la boucle d'événements.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Set

from statguess.config.settings import settings
from .visibility import reveal_event

logger = logging.getLogger(__name__)


@dataclass
class RevealTracker:
    duration: float = field(default_factory=lambda: settings.REVEAL_HIGHLIGHT_SECONDS)
    _previous: Optional[Set[str]] = field(default=None, init=False, repr=False)
    _highlighted: Set[str] = field(default_factory=set, init=False)
    _clear_task: Optional[asyncio.Task] = field(default=None, init=False, repr=False)

    @property
    def highlighted(self) -> FrozenSet[str]:
        return frozenset(self._highlighted)

    @property
    def has_pending_clear(self) -> bool:
        return bool(self._clear_task and not self._clear_task.done())

    def prime(self, selected: Iterable[str]) -> None:
        """Mémorise l'état courant comme référence, sans surlignage."""
        self._previous = set(selected)

    def track(self, selected: Iterable[str]) -> Set[str]:
        """
        Compare `selected` à l'état précédent et surligne les nouvelles clés.
        Retourne l'événement de reveal (vide si rien de nouveau).
        """
        current = set(selected)
        if self._previous is None:
            self._previous = current
            return set()
        revealed = reveal_event(self._previous, current)
        self._previous = current
        if revealed:
            self._restart(revealed)
        return revealed

    def _restart(self, revealed: Set[str]) -> None:
        self._cancel_pending()
        self._highlighted = set(revealed)
        loop = asyncio.get_running_loop()
        self._clear_task = loop.create_task(self._clear_after(self.duration))
        logger.debug("Reveal highlight started", extra={"revealed": sorted(revealed)})

    async def _clear_after(self, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            return
        self._highlighted = set()

    def cancel(self) -> None:
        """Annule un effacement en attente sans attendre la tâche (purge synchrone)."""
        self._cancel_pending()
        self._highlighted = set()

    def _cancel_pending(self) -> None:
        if self._clear_task and not self._clear_task.done():
            self._clear_task.cancel()
        self._clear_task = None

    async def aclose(self) -> None:
        """Annule un effacement en attente (fin de session de création)."""
        task = self._clear_task
        self._clear_task = None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._highlighted = set()
