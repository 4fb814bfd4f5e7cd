"""
Module routes/players.py
Rôle:
- Recherche d'athlètes par nom (autocomplétion côté créateur).
- Vue "vitrine" des stats d'un athlète (tout affiché, identité révélée).

Intégrations:
- StatsClient (stats_client): fournisseur de stats (surchargé dans les tests).
- stat_view / visibility: construction du payload d'affichage.

Robustesse:
- Requête < 2 caractères → liste vide, aucun appel réseau.
- Erreur du fournisseur → 502 avec le message.
"""
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from statguess.services.stat_mappings import NAMESPACES
from statguess.services.stat_view import build_player_view
from statguess.services.stats_client import StatsClient, StatsProviderError, get_stats_client
from statguess.services.visibility import AUTHOR, StatsConfig, full_key_set, initialize

router = APIRouter(prefix="/api/players", tags=["players"])


@router.get("/search")
def search_players(
    q: str = Query("", description="Nom partiel (≥ 2 caractères)"),
    stats: StatsClient = Depends(get_stats_client),
):
    """Liste `{id, fullName}` des athlètes correspondant à `q`."""
    try:
        results = stats.search_players(q)
    except StatsProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return {"people": [r.to_dict() for r in results]}


@router.get("/{player_id}/stats")
def player_stats(
    player_id: int,
    mode: Literal["display", "author"] = Query("display", description="display = vitrine, author = aperçu créateur"),
    stats: StatsClient = Depends(get_stats_client),
):
    """
    Stats complètes d'un athlète.
    - display: tout est visible (vitrine / fin de partie) ;
    - author: aperçu avec la partition par défaut (info masquée, stats révélées).
    """
    try:
        player = stats.fetch_player_data(player_id)
    except StatsProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    config = StatsConfig()
    if mode == AUTHOR:
        for ns in NAMESPACES:
            keys = full_key_set(ns, player.records(ns))
            config = config.with_namespace(ns, initialize(config.get(ns), keys, ns))
    view = build_player_view(player, config, mode)
    view["statsConfig"] = config.to_dict()
    return view
