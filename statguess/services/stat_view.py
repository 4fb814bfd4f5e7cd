"""
Service: stat_view.py
Rôle:
- Construire les payloads d'affichage (fiche + tableaux de saisons) à partir d'un `PlayerData`
  et d'une `StatsConfig`, pour un mode donné (author / display / restricted).

Règles de rendu des valeurs:
- 0 → "0" (jamais vide) ; None / "" → "-" ; booléens → "Yes" / "No".
- Une valeur objet n'est pas rendue à plat : elle devient un sous-groupe libellé.
- `teamDetails` n'a pas de colonne propre : il est attaché en `detail` à la cellule `team`
  quand sa valeur diffère.

Identité:
- En mode restricted, nom / identifiant / photo sont masqués (silhouette générique).
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence

from .stat_mappings import HITTING, INFO, PITCHING, SUBFIELD_LABELS, dependents_of, is_numeric, label_for
from .stats_client import GENERIC_HEADSHOT_URL, PlayerData
from .visibility import (
    AUTHOR,
    RESTRICTED,
    SelectionState,
    StatsConfig,
    filter_visible_record,
    full_key_set,
    visible_keys,
)

PLACEHOLDER = "-"
EMPTY: FrozenSet[str] = frozenset()


def format_value(value: Any) -> str:
    """Rendu texte d'une valeur scalaire."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, (int, float)) and value == 0:
        return "0"
    return str(value)


def detail_for(record: Mapping[str, Any], key: str) -> Optional[str]:
    """Valeur d'un champ dépendant à afficher avec `key` (si présente et différente)."""
    for dep in dependents_of(key):
        value = record.get(dep)
        if value not in (None, "") and value != record.get(key):
            return str(value)
    return None


def _key_state(key: str, selection: SelectionState, mode: str) -> Optional[str]:
    # état coloré uniquement côté auteur (vert = révélé, rouge = masqué)
    if mode != AUTHOR:
        return None
    if key in selection.selected:
        return "selected"
    if key in selection.deselected:
        return "deselected"
    return None


def _section_visible(selection: SelectionState, mode: str) -> bool:
    return mode != RESTRICTED or bool(selection.selected)


def build_info_section(
    info: Mapping[str, Any],
    selection: SelectionState,
    mode: str,
    highlighted: FrozenSet[str] = EMPTY,
) -> Dict[str, Any]:
    full_keys = full_key_set(INFO, info)
    record = filter_visible_record(info, selection, mode)
    fields: List[Dict[str, Any]] = []
    groups: List[Dict[str, Any]] = []

    for key in visible_keys(full_keys, selection, mode):
        value = record.get(key)
        base = {
            "key": key,
            "label": label_for(INFO, key),
            "state": _key_state(key, selection, mode),
            "highlight": key in highlighted,
        }
        if isinstance(value, dict):
            base["fields"] = [
                {"key": sub, "label": SUBFIELD_LABELS.get(sub, sub), "value": format_value(v)}
                for sub, v in value.items()
                if not isinstance(v, dict)
            ]
            groups.append(base)
            continue
        base["value"] = format_value(value)
        base["detail"] = detail_for(record, key)
        fields.append(base)

    return {
        "visible": _section_visible(selection, mode),
        "keys": full_keys,
        "fields": fields,
        "groups": groups,
    }


def build_stats_section(
    namespace: str,
    seasons: Sequence[Mapping[str, Any]],
    selection: SelectionState,
    mode: str,
    highlighted: FrozenSet[str] = EMPTY,
) -> Dict[str, Any]:
    full_keys = full_key_set(namespace, seasons)
    keys = visible_keys(full_keys, selection, mode)
    columns = [
        {
            "key": key,
            "label": label_for(namespace, key),
            "numeric": is_numeric(namespace, key),
            "state": _key_state(key, selection, mode),
            "highlight": key in highlighted,
        }
        for key in keys
    ]
    rows = []
    for season in seasons:
        record = filter_visible_record(season, selection, mode)
        rows.append([
            {"key": key, "value": format_value(record.get(key)), "detail": detail_for(record, key)}
            for key in keys
        ])
    return {
        "visible": _section_visible(selection, mode),
        "keys": full_keys,
        "columns": columns,
        "rows": rows,
    }


def default_tab(player: PlayerData, hitting_visible: bool, pitching_visible: bool) -> Optional[str]:
    """Onglet ouvert par défaut : pitching pour un lanceur, hitting sinon."""
    order = (PITCHING, HITTING) if player.is_pitcher else (HITTING, PITCHING)
    flags = {HITTING: hitting_visible, PITCHING: pitching_visible}
    return next((tab for tab in order if flags[tab]), None)


def build_player_view(
    player: PlayerData,
    config: StatsConfig,
    mode: str,
    *,
    highlights: Optional[Mapping[str, FrozenSet[str]]] = None,
) -> Dict[str, Any]:
    """Payload complet d'une page (fiche + onglets) pour un mode."""
    highlights = highlights or {}
    info = build_info_section(player.info, config.info, mode, highlights.get(INFO, EMPTY))
    hitting = build_stats_section(HITTING, player.hitting, config.hitting, mode, highlights.get(HITTING, EMPTY))
    pitching = build_stats_section(PITCHING, player.pitching, config.pitching, mode, highlights.get(PITCHING, EMPTY))

    reveal_identity = mode != RESTRICTED
    identity = {
        "id": player.player_id if reveal_identity else None,
        "fullName": player.full_name if reveal_identity else None,
        "imageUrl": player.image_url if reveal_identity else GENERIC_HEADSHOT_URL,
    }
    return {
        "mode": mode,
        "player": identity,
        "info": info,
        "hitting": hitting,
        "pitching": pitching,
        "defaultTab": default_tab(player, hitting["visible"], pitching["visible"]),
        "nothingSelected": not (info["visible"] or hitting["visible"] or pitching["visible"]),
    }
