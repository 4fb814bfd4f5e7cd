"""
Service: stat_mappings.py
Rôle:
- Tables d'affichage par namespace (info / hitting / pitching) : libellé, priorité d'ordre,
  alignement numérique.
- Une clé absente d'une table de stats n'est ni affichée ni proposée au basculement.

Notes:
- `order` absent (None) → la clé est triée en dernier.
- Les clés texte (season, team, teamDetails, awards) sont alignées à gauche côté UI.
- `PAIRED_FIELDS` déclare les champs dépendants : `teamDetails` suit toujours `team`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

Namespace = Literal["info", "hitting", "pitching"]

INFO: Namespace = "info"
HITTING: Namespace = "hitting"
PITCHING: Namespace = "pitching"
NAMESPACES: Tuple[Namespace, ...] = (INFO, HITTING, PITCHING)


@dataclass(frozen=True)
class StatMapping:
    label: str
    order: Optional[int] = None
    numeric: bool = True


# clé principale -> clés dépendantes (même côté selected/deselected)
PAIRED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "team": ("teamDetails",),
}

PLAYER_INFO_MAPPINGS: Dict[str, StatMapping] = {
    "age": StatMapping("Age", 1),
    "position": StatMapping("Position", 2, numeric=False),
    "team": StatMapping("Team", 3, numeric=False),
    "teamDetails": StatMapping("Team Details", 4, numeric=False),
    "bats": StatMapping("Bats", 5, numeric=False),
    "throws": StatMapping("Throws", 6, numeric=False),
    "height": StatMapping("Height", 7, numeric=False),
    "weight": StatMapping("Weight", 8),
    "birthDate": StatMapping("Born", 9, numeric=False),
    "birthPlace": StatMapping("Birthplace", 10, numeric=False),
    "mlbDebutDate": StatMapping("MLB Debut", 11, numeric=False),
    "lastPlayedDate": StatMapping("Last Played", 12, numeric=False),
    "jerseyNumber": StatMapping("Jersey #", 13, numeric=False),
    "nickName": StatMapping("Nickname", 14, numeric=False),
    "draftYear": StatMapping("Draft Year", 15),
    "active": StatMapping("Active", 16, numeric=False),
    "awards": StatMapping("Awards", 17),
}

# Libellés des sous-champs des valeurs objet (rendues en sous-groupe)
SUBFIELD_LABELS: Dict[str, str] = {
    "city": "City",
    "stateProvince": "State / Province",
    "country": "Country",
}

HITTING_STAT_MAPPINGS: Dict[str, StatMapping] = {
    "season": StatMapping("Year", 1, numeric=False),
    "team": StatMapping("Team", 2, numeric=False),
    "teamDetails": StatMapping("Team Details", 3, numeric=False),
    "gamesPlayed": StatMapping("G", 4),
    "plateAppearances": StatMapping("PA", 5),
    "atBats": StatMapping("AB", 6),
    "runs": StatMapping("R", 7),
    "hits": StatMapping("H", 8),
    "doubles": StatMapping("2B", 9),
    "triples": StatMapping("3B", 10),
    "homeRuns": StatMapping("HR", 11),
    "rbi": StatMapping("RBI", 12),
    "stolenBases": StatMapping("SB", 13),
    "caughtStealing": StatMapping("CS", 14),
    "baseOnBalls": StatMapping("BB", 15),
    "strikeOuts": StatMapping("SO", 16),
    "avg": StatMapping("AVG", 17),
    "obp": StatMapping("OBP", 18),
    "slg": StatMapping("SLG", 19),
    "ops": StatMapping("OPS", 20),
    "totalBases": StatMapping("TB", 21),
    "groundIntoDoublePlay": StatMapping("GIDP", 22),
    "hitByPitch": StatMapping("HBP", 23),
    "sacBunts": StatMapping("SH", 24),
    "sacFlies": StatMapping("SF", 25),
    "intentionalWalks": StatMapping("IBB", 26),
    "awards": StatMapping("Awards", 27, numeric=False),
}

PITCHING_STAT_MAPPINGS: Dict[str, StatMapping] = {
    "season": StatMapping("Year", 1, numeric=False),
    "team": StatMapping("Team", 2, numeric=False),
    "teamDetails": StatMapping("Team Details", 3, numeric=False),
    "wins": StatMapping("W", 4),
    "losses": StatMapping("L", 5),
    "winPercentage": StatMapping("W-L%", 6),
    "era": StatMapping("ERA", 7),
    "gamesPlayed": StatMapping("G", 8),
    "gamesStarted": StatMapping("GS", 9),
    "gamesFinished": StatMapping("GF", 10),
    "completeGames": StatMapping("CG", 11),
    "shutouts": StatMapping("SHO", 12),
    "saves": StatMapping("SV", 13),
    "holds": StatMapping("HLD", 14),
    "inningsPitched": StatMapping("IP", 15),
    "hits": StatMapping("H", 16),
    "runs": StatMapping("R", 17),
    "earnedRuns": StatMapping("ER", 18),
    "homeRuns": StatMapping("HR", 19),
    "baseOnBalls": StatMapping("BB", 20),
    "intentionalWalks": StatMapping("IBB", 21),
    "strikeOuts": StatMapping("SO", 22),
    "hitByPitch": StatMapping("HBP", 23),
    "balks": StatMapping("BK", 24),
    "wildPitches": StatMapping("WP", 25),
    "battersFaced": StatMapping("BF", 26),
    "whip": StatMapping("WHIP", 27),
    "hitsPer9Inn": StatMapping("H9", 28),
    "homeRunsPer9": StatMapping("HR9", 29),
    "walksPer9Inn": StatMapping("BB9", 30),
    "strikeoutsPer9Inn": StatMapping("SO9", 31),
    "strikeoutWalkRatio": StatMapping("SO/W", 32),
    "awards": StatMapping("Awards", 33, numeric=False),
}

MAPPINGS: Dict[str, Dict[str, StatMapping]] = {
    INFO: PLAYER_INFO_MAPPINGS,
    HITTING: HITTING_STAT_MAPPINGS,
    PITCHING: PITCHING_STAT_MAPPINGS,
}


def mapping_for(namespace: str) -> Dict[str, StatMapping]:
    """Retourne la table d'un namespace (ValueError si inconnu)."""
    try:
        return MAPPINGS[namespace]
    except KeyError:
        raise ValueError(f"Unknown namespace {namespace!r}") from None


def label_for(namespace: str, key: str) -> str:
    mapping = mapping_for(namespace).get(key)
    return mapping.label if mapping else key


def is_numeric(namespace: str, key: str) -> bool:
    mapping = mapping_for(namespace).get(key)
    return mapping.numeric if mapping else True


def dependents_of(key: str) -> Tuple[str, ...]:
    return PAIRED_FIELDS.get(key, ())


def dependent_keys() -> frozenset:
    """Ensemble des clés qui ne s'affichent jamais comme colonne autonome."""
    return frozenset(dep for deps in PAIRED_FIELDS.values() for dep in deps)
