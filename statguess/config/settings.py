"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres de l'app (nom, host/port, chemins, API de stats, jeu…).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from statguess.config.settings import settings`.

Bonnes pratiques
----------------
- `STATS_API_BASE_URL` pointe par défaut vers l'API publique MLB (statsapi.mlb.com).
- `PUBLIC_BASE_URL` sert à construire les liens partageables (`<base>/game/<id>`).
- `DATA_DIR` calcule un chemin relatif au package : `<repo>/statguess/data`.

Exemples de `.env`
------------------
APP_NAME="Statguess (Staging)"
PORT=8080
LOG_LEVEL="DEBUG"
PUBLIC_BASE_URL="https://statguess.example.org"
DATA_DIR="/var/opt/statguess/data"
"""
import os
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Statguess Backend"
    # Bind réseau (FastAPI / Uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Fournisseur de statistiques (API MLB publique, sans clé)
    STATS_API_BASE_URL: str = "https://statsapi.mlb.com/api/v1"
    STATS_API_CONNECT_TIMEOUT: float = 5.0
    STATS_API_READ_TIMEOUT: float = 20.0

    # Front : origine des liens partageables + whitelist CORS
    PUBLIC_BASE_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Règles de jeu
    REVEAL_HIGHLIGHT_SECONDS: float = 2.0
    # Brouillons de création abandonnés : purgés après ce délai d'inactivité
    DRAFT_TTL_SECONDS: int = 3600
    DEFAULT_MAX_GUESSES: int = 3
    MAX_GUESSES_LIMIT: int = 20

    # Sessions utilisateurs (token Bearer ou cookie HttpOnly)
    USER_SESSION_TTL_SECONDS: int = 7 * 24 * 3600

    # Répertoire des fichiers persistés (games, guesses, users)
    # Par défaut: <repo>/statguess/data
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
