"""
Module routes/drafts.py
Rôle:
- Pilotage d'une session de création : choix de l'athlète, bascule des champs
  (un par un ou par section), options de partie, publication.

Intégrations:
- draft_store: registre en mémoire des brouillons (moteur de visibilité + surlignage).
- StatsClient: chargement des stats à la création du brouillon.
- GameStore: persistance à la publication.

Endpoints:
- POST   /api/drafts                      → 201 vue auteur du nouveau brouillon
- GET    /api/drafts/{draft_id}           → vue auteur (avec clés surlignées)
- DELETE /api/drafts/{draft_id}           → abandon
- POST   /api/drafts/{draft_id}/toggle    → {namespace, key}
- POST   /api/drafts/{draft_id}/toggle-all→ {namespace, selected: [...]}
- POST   /api/drafts/{draft_id}/options   → GameOptions
- POST   /api/drafts/{draft_id}/publish   → 201 {game, config, link}

Notes:
- Les routes sont async : le timer de surlignage vit dans la boucle d'événements.
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from statguess.deps.auth import current_user
from statguess.models.game import GameOptions
from statguess.services.draft_store import Draft, create_draft, drop_draft, get_draft, publish_draft
from statguess.services.game_store import GameStore, PersistenceError, get_game_store
from statguess.services.identity import User
from statguess.services.stats_client import StatsClient, StatsProviderError, get_stats_client

router = APIRouter(prefix="/api/drafts", tags=["drafts"])

NamespaceName = Literal["info", "hitting", "pitching"]


class DraftCreatePayload(BaseModel):
    player_id: Optional[int] = Field(None, description="Athlète choisi via /api/players/search")


class TogglePayload(BaseModel):
    namespace: NamespaceName
    key: str


class ToggleAllPayload(BaseModel):
    namespace: NamespaceName
    selected: List[str] = Field(default_factory=list, description="Clés à révéler (le reste est masqué)")


class PublishPayload(BaseModel):
    title: Optional[str] = None


def _draft_or_404(draft_id: str) -> Draft:
    draft = get_draft(draft_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="draft_not_found")
    return draft


@router.post("")
async def open_draft(payload: DraftCreatePayload, stats: StatsClient = Depends(get_stats_client)):
    """Charge les stats de l'athlète et applique la partition par défaut."""
    if not payload.player_id:
        raise HTTPException(status_code=400, detail="player_id is required")
    try:
        draft = await create_draft(payload.player_id, stats)
    except StatsProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return JSONResponse(status_code=201, content=draft.author_view())


@router.get("/{draft_id}")
async def read_draft(draft_id: str):
    return _draft_or_404(draft_id).author_view()


@router.delete("/{draft_id}")
async def discard_draft(draft_id: str):
    if not await drop_draft(draft_id):
        raise HTTPException(status_code=404, detail="draft_not_found")
    return {"ok": True, "draftId": draft_id}


@router.post("/{draft_id}/toggle")
async def toggle_key(draft_id: str, payload: TogglePayload):
    """Bascule une clé (les champs appariés suivent) ; renvoie les clés révélées."""
    draft = _draft_or_404(draft_id)
    async with draft.lock:
        revealed = draft.toggle(payload.namespace, payload.key)
    return {"revealed": sorted(revealed), **draft.author_view()}


@router.post("/{draft_id}/toggle-all")
async def toggle_section(draft_id: str, payload: ToggleAllPayload):
    """Remplace la partition d'une section entière."""
    draft = _draft_or_404(draft_id)
    async with draft.lock:
        revealed = draft.toggle_all(payload.namespace, payload.selected)
    return {"revealed": sorted(revealed), **draft.author_view()}


@router.post("/{draft_id}/options")
async def update_options(draft_id: str, options: GameOptions):
    draft = _draft_or_404(draft_id)
    draft.options = options
    return draft.author_view()


@router.post("/{draft_id}/publish")
async def publish(
    draft_id: str,
    payload: PublishPayload,
    user: Optional[User] = Depends(current_user),
    store: GameStore = Depends(get_game_store),
):
    """Persiste la configuration (créateur = utilisateur connecté ou invité)."""
    draft = _draft_or_404(draft_id)
    try:
        result = await publish_draft(draft, store, title=payload.title, creator_id=user.id if user else None)
    except PersistenceError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse(status_code=201, content=result)
