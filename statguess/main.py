"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- Monte les routeurs REST (parties, propositions, athlètes, brouillons, auth, santé),
- Configure le logging et journalise la liste des routes au démarrage.

Notes
-----
- ⚠️ Le routeur `guesses` doit être monté AVANT `games` : sinon `/api/games/{game_id}`
  capture `/api/games/guesses`.
- Le middleware CORS est ajouté AVANT les include_router.
- Les origines autorisées viennent de `settings.ALLOWED_ORIGINS`.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statguess.config.settings import settings
from statguess.routes.auth import router as auth_router
from statguess.routes.drafts import router as drafts_router
from statguess.routes.games import router as games_router
from statguess.routes.guesses import router as guesses_router
from statguess.routes.health import router as health_router
from statguess.routes.players import router as players_router
from statguess.services.draft_store import drop_draft, list_draft_ids

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# ===========================
# CORS
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,          # cookie de session
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# Montage des routers
# ===========================
app.include_router(guesses_router)     # avant games_router (voir Notes)
app.include_router(games_router)
app.include_router(players_router)
app.include_router(drafts_router)
app.include_router(auth_router)
app.include_router(health_router)


@app.get("/")
async def root():
    """Ping basique : vérifie que l'app tourne (sans appel au fournisseur de stats)."""
    return {"ok": True, "service": "statguess-backend"}


@app.on_event("startup")
async def list_routes():
    """Configure le logging puis journalise les routes montées (diagnostic)."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    logger.info("Stats provider: %s", settings.STATS_API_BASE_URL)
    for r in app.routes:
        methods = sorted(getattr(r, "methods", None) or [])
        logger.info("Route %s %s", getattr(r, "path", "?"), ",".join(methods))


@app.on_event("shutdown")
async def close_drafts():
    """Annule les timers de surlignage des brouillons encore ouverts."""
    for draft_id in list_draft_ids():
        await drop_draft(draft_id)
