"""
Service: stats_client.py
- Centralise les appels vers l'API publique de statistiques (MLB Stats API par défaut).
- Normalise la réponse en trois blocs : fiche biographique (info), saisons au bâton (hitting),
  saisons au lancer (pitching).

Fonctions principales:
- CLIENT.search_players(query): recherche par nom (≥ 2 caractères, sinon aucun appel).
- CLIENT.fetch_player_data(player_id): identité + fiche + saisons triées.

Erreurs:
- Toute erreur réseau / JSON / forme de payload est encapsulée dans `StatsProviderError`.
- Aucun retry (ni applicatif, ni transport) : l'échec est remonté tel quel.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from statguess.config.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Tuple[float, float] = (
    settings.STATS_API_CONNECT_TIMEOUT,
    settings.STATS_API_READ_TIMEOUT,
)  # connect, read
MIN_SEARCH_LENGTH = 2
PLAYER_HYDRATE = "currentTeam,awards,stats(group=[hitting,pitching],type=[yearByYear])"

HEADSHOT_URL = (
    "https://img.mlbstatic.com/mlb-photos/image/upload/"
    "d_people:generic:headshot:67:current.png/w_213,q_auto:best/v1/people/{player_id}/headshot/67/current"
)
GENERIC_HEADSHOT_URL = HEADSHOT_URL.format(player_id=1)


class StatsProviderError(RuntimeError):
    """Erreur encapsulant un échec de communication avec le fournisseur de stats."""


@dataclass
class PlayerSummary:
    id: int
    full_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "fullName": self.full_name}


@dataclass
class PlayerData:
    player_id: int
    full_name: str
    image_url: str
    primary_position: Optional[str] = None
    info: Dict[str, Any] = field(default_factory=dict)
    hitting: List[Dict[str, Any]] = field(default_factory=list)
    pitching: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_pitcher(self) -> bool:
        return self.primary_position == "Pitcher"

    def records(self, namespace: str) -> Any:
        """Fiche (info) ou liste de saisons (hitting / pitching)."""
        return {"info": self.info, "hitting": self.hitting, "pitching": self.pitching}[namespace]


class StatsClient:
    """
    Client HTTP centralisé pour l'API de statistiques.
    - Adapter HTTP sans retry (Retry(total=0)) : une erreur remonte immédiatement.
    - Journalise chaque requête avec un identifiant de corrélation.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or self._build_session()
        self.timeout = timeout

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        # aucun retry : une erreur du fournisseur remonte immédiatement à l'UI
        retry = Retry(total=0, allowed_methods=frozenset({"GET"}), raise_on_status=False)
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _get(self, path: str, params: Dict[str, Any], *, request_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Stats request start", extra={"stats_url": url, "stats_request_id": request_id})
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            logger.warning("Stats request timeout", extra={"stats_url": url, "stats_request_id": request_id})
            raise StatsProviderError("Stats provider request timed out") from exc
        except requests.RequestException as exc:
            logger.error(
                "Stats request failed",
                exc_info=True,
                extra={"stats_url": url, "stats_request_id": request_id},
            )
            raise StatsProviderError("Stats provider request failed") from exc

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error(
                "Invalid JSON payload from stats provider",
                exc_info=True,
                extra={"stats_url": url, "stats_request_id": request_id},
            )
            raise StatsProviderError("Invalid JSON payload from stats provider") from exc
        if not isinstance(data, dict):
            raise StatsProviderError("Unexpected payload shape from stats provider")
        return data

    def search_players(self, query: str) -> List[PlayerSummary]:
        """Recherche par nom partiel (insensible à la casse côté API). < 2 caractères → []."""
        term = (query or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            return []
        request_id = f"search-{uuid4().hex}"
        data = self._get("/people/search", {"names": term}, request_id=request_id)
        results: List[PlayerSummary] = []
        for person in data.get("people") or []:
            if not isinstance(person, dict) or person.get("id") is None:
                continue
            results.append(PlayerSummary(id=int(person["id"]), full_name=str(person.get("fullName") or "")))
        logger.info(
            "Player search completed",
            extra={"stats_request_id": request_id, "query": term, "count": len(results)},
        )
        return results

    def fetch_player_data(self, player_id: int) -> PlayerData:
        """Fiche + saisons d'un joueur. ValueError si aucun identifiant n'est fourni."""
        if not player_id:
            raise ValueError("No player ID provided")
        request_id = f"player-{uuid4().hex}"
        data = self._get(f"/people/{int(player_id)}", {"hydrate": PLAYER_HYDRATE}, request_id=request_id)
        people = data.get("people") or []
        if not people or not isinstance(people[0], dict):
            raise StatsProviderError("Player information not found")
        try:
            player = normalize_person(people[0])
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(
                "Unexpected player payload",
                exc_info=True,
                extra={"stats_request_id": request_id, "player_id": player_id},
            )
            raise StatsProviderError("Unexpected player payload from stats provider") from exc
        logger.info(
            "Player data loaded",
            extra={
                "stats_request_id": request_id,
                "player_id": player.player_id,
                "hitting_seasons": len(player.hitting),
                "pitching_seasons": len(player.pitching),
            },
        )
        return player


# ---------------------------------------------------------------------------
# Normalisation du payload
# ---------------------------------------------------------------------------
def _description(value: Any, key: str = "description") -> Optional[str]:
    if isinstance(value, dict):
        return value.get(key)
    return None


def _season_awards(person: Dict[str, Any]) -> Dict[str, List[str]]:
    by_season: Dict[str, List[str]] = {}
    for award in person.get("awards") or []:
        season = str(award.get("season") or "")
        name = award.get("name")
        if not season or not name:
            continue
        names = by_season.setdefault(season, [])
        if name not in names:
            names.append(name)
    return by_season


def _splits_for(person: Dict[str, Any], group: str) -> List[Dict[str, Any]]:
    for block in person.get("stats") or []:
        if (block.get("group") or {}).get("displayName") != group:
            continue
        if (block.get("type") or {}).get("displayName") != "yearByYear":
            continue
        return [s for s in block.get("splits") or [] if isinstance(s, dict)]
    return []


def normalize_seasons(splits: List[Dict[str, Any]], awards: Dict[str, List[str]]) -> List[Dict[str, Any]]:
    """
    Regroupe les splits par saison :
    - une seule équipe → team = teamDetails = nom de l'équipe ;
    - plusieurs équipes → stats du split agrégé (sans équipe), team = "<n> Teams",
      teamDetails = noms joints.
    """
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for split in splits:
        season = str(split.get("season") or "")
        if season:
            grouped.setdefault(season, []).append(split)

    seasons: List[Dict[str, Any]] = []
    for season in sorted(grouped, key=lambda s: int(s) if s.isdigit() else 0):
        entries = grouped[season]
        with_team = [s for s in entries if s.get("team")]
        aggregate = next((s for s in entries if not s.get("team")), None)
        names = list(dict.fromkeys(str(s["team"].get("name") or "") for s in with_team))

        if len(with_team) > 1:
            source = aggregate or with_team[0]
            team = f"{len(with_team)} Teams"
            details = ", ".join(names)
        else:
            source = with_team[0] if with_team else entries[0]
            team = names[0] if names else None
            details = team

        record: Dict[str, Any] = {"season": season, "team": team, "teamDetails": details}
        record.update(source.get("stat") or {})
        record["awards"] = ", ".join(awards.get(season, []))
        seasons.append(record)
    return seasons


def _teams_played_for(*season_lists: List[Dict[str, Any]]) -> List[str]:
    teams: List[str] = []
    for seasons in season_lists:
        for record in seasons:
            for name in str(record.get("teamDetails") or "").split(", "):
                if name and name not in teams:
                    teams.append(name)
    return teams


def normalize_person(person: Dict[str, Any]) -> PlayerData:
    """Transforme un objet `people[0]` de l'API en `PlayerData`."""
    player_id = int(person["id"])
    awards = _season_awards(person)
    hitting = normalize_seasons(_splits_for(person, "hitting"), awards)
    pitching = normalize_seasons(_splits_for(person, "pitching"), awards)
    position = _description(person.get("primaryPosition"), "name")
    current_team = _description(person.get("currentTeam"), "name")
    all_teams = _teams_played_for(hitting, pitching)

    info: Dict[str, Any] = {
        "age": person.get("currentAge"),
        "position": position,
        "team": current_team,
        "teamDetails": ", ".join(all_teams) or current_team,
        "bats": _description(person.get("batSide")),
        "throws": _description(person.get("pitchHand")),
        "height": person.get("height"),
        "weight": person.get("weight"),
        "birthDate": person.get("birthDate"),
        "birthPlace": {
            "city": person.get("birthCity"),
            "stateProvince": person.get("birthStateProvince"),
            "country": person.get("birthCountry"),
        },
        "mlbDebutDate": person.get("mlbDebutDate"),
        "lastPlayedDate": person.get("lastPlayedDate"),
        "jerseyNumber": person.get("primaryNumber"),
        "nickName": person.get("nickName"),
        "draftYear": person.get("draftYear"),
        "active": person.get("active"),
        "awards": len(person.get("awards") or []),
    }

    return PlayerData(
        player_id=player_id,
        full_name=str(person.get("fullName") or ""),
        image_url=HEADSHOT_URL.format(player_id=player_id),
        primary_position=position,
        info=info,
        hitting=hitting,
        pitching=pitching,
    )


CLIENT = StatsClient(settings.STATS_API_BASE_URL)


def get_stats_client() -> StatsClient:
    """Dépendance FastAPI (surchargée dans les tests)."""
    return CLIENT
