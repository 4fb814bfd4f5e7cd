import pytest

from statguess.main import app
from statguess.services.game_store import GameStore, get_game_store
from statguess.services.identity import UserStore, get_user_store
from statguess.services.stats_client import (
    PlayerData,
    PlayerSummary,
    StatsProviderError,
    get_stats_client,
    normalize_person,
)

TROUT_ID = 545361


def trout_person() -> dict:
    """Payload `people[0]` tel que renvoyé par /people/{id}?hydrate=..."""
    return {
        "id": TROUT_ID,
        "fullName": "Mike Trout",
        "currentAge": 33,
        "primaryPosition": {"name": "Outfielder"},
        "currentTeam": {"name": "Los Angeles Angels"},
        "batSide": {"description": "Right"},
        "pitchHand": {"description": "Right"},
        "height": "6' 2\"",
        "weight": 235,
        "birthDate": "1991-08-07",
        "birthCity": "Vineland",
        "birthStateProvince": "NJ",
        "birthCountry": "USA",
        "mlbDebutDate": "2011-07-08",
        "primaryNumber": "27",
        "active": True,
        "awards": [
            {"season": "2012", "name": "AL Rookie of the Year"},
            {"season": "2014", "name": "AL MVP"},
        ],
        "stats": [
            {
                "group": {"displayName": "hitting"},
                "type": {"displayName": "yearByYear"},
                "splits": [
                    {
                        "season": "2012",
                        "team": {"name": "Los Angeles Angels"},
                        "stat": {"gamesPlayed": 139, "homeRuns": 30, "avg": ".326", "caughtStealing": 0},
                    },
                    {
                        "season": "2014",
                        "team": {"name": "Los Angeles Angels"},
                        "stat": {"gamesPlayed": 157, "homeRuns": 36, "avg": ".287", "caughtStealing": 3},
                    },
                ],
            }
        ],
    }


class FakeStatsClient:
    """Fournisseur de stats en mémoire (même interface que StatsClient)."""

    def __init__(self, players):
        self.players = {p.player_id: p for p in players}
        self.search_calls = []
        self.fail = False

    def search_players(self, query):
        if self.fail:
            raise StatsProviderError("Stats provider request failed")
        term = (query or "").strip().lower()
        if len(term) < 2:
            return []
        self.search_calls.append(term)
        return [
            PlayerSummary(id=p.player_id, full_name=p.full_name)
            for p in self.players.values()
            if term in p.full_name.lower()
        ]

    def fetch_player_data(self, player_id) -> PlayerData:
        if not player_id:
            raise ValueError("No player ID provided")
        if self.fail or int(player_id) not in self.players:
            raise StatsProviderError("Player information not found")
        return self.players[int(player_id)]


@pytest.fixture
def trout() -> PlayerData:
    return normalize_person(trout_person())


@pytest.fixture
def fake_stats(trout) -> FakeStatsClient:
    return FakeStatsClient([trout])


@pytest.fixture
def game_store(tmp_path) -> GameStore:
    store = GameStore(tmp_path)
    store.load()
    return store


@pytest.fixture
def user_store(tmp_path) -> UserStore:
    store = UserStore(tmp_path, session_ttl=3600)
    store.load()
    return store


@pytest.fixture
def client(fake_stats, game_store, user_store):
    from fastapi.testclient import TestClient

    app.dependency_overrides[get_stats_client] = lambda: fake_stats
    app.dependency_overrides[get_game_store] = lambda: game_store
    app.dependency_overrides[get_user_store] = lambda: user_store
    # un seul event loop pour toute la durée du test (timers de surlignage, verrous)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
