"""
Module routes/health.py
Rôle:
- Endpoints de santé (service OK + ping du fournisseur de stats).

Intégrations:
- settings: nom d'app + URL du fournisseur.
- StatsClient.search_players: requête légère pour mesurer la latence.
"""
import time

from fastapi import APIRouter, Depends

from statguess.config.settings import settings
from statguess.services.stats_client import StatsClient, StatsProviderError, get_stats_client

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service configuré."""
    return {"ok": True, "service": settings.APP_NAME}


@router.get("/stats")
def health_stats(stats: StatsClient = Depends(get_stats_client)):
    """
    Vérifie la disponibilité du fournisseur de stats en mesurant une latence simple.
    - Recherche courte ("ruth") pour minimiser la taille de réponse.
    """
    t0 = time.perf_counter()
    try:
        results = stats.search_players("ruth")
    except StatsProviderError as e:
        return {
            "ok": False,
            "endpoint": settings.STATS_API_BASE_URL,
            "latency_s": round(time.perf_counter() - t0, 3),
            "error": str(e),
        }
    return {
        "ok": True,
        "endpoint": settings.STATS_API_BASE_URL,
        "latency_s": round(time.perf_counter() - t0, 3),
        "sample": [r.to_dict() for r in results[:3]],
    }
