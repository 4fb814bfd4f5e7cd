"""
Service: visibility.py
Rôle:
- Moteur de visibilité des stats : partition selected (révélé) / deselected (masqué)
  par namespace (info / hitting / pitching).
- Fonctions pures sur un état explicite et sérialisable (`SelectionState`, `StatsConfig`) :
  aucune I/O, aucun réseau, aucun état caché.

Opérations:
- full_key_set(namespace, records)          → clés connues, triées par priorité d'affichage
- initialize(state, full_keys, namespace)   → politique par défaut (idempotent si déjà rempli)
- toggle(state, key, full_keys)             → bascule une clé (+ ses champs dépendants)
- toggle_all(state, full_keys, new_selected)→ bascule d'une section entière
- visible_keys(full_keys, state, mode)      → colonnes rendues selon le mode
- filter_visible_record(record, state, mode)→ valeurs exposées selon le mode
- reveal_event(previous, current)           → clés nouvellement révélées (surlignage transitoire)

Invariants:
- selected ∩ deselected = ∅ ; une clé hors du jeu complet n'entre dans aucun des deux.
- Un champ dépendant (cf. `PAIRED_FIELDS`) est toujours du même côté que sa clé principale
  après `toggle`. `toggle_all` ne fait que *tirer* le dépendant vers selected.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Set, Union

from .stat_mappings import (
    INFO,
    NAMESPACES,
    dependent_keys,
    dependents_of,
    mapping_for,
)

ViewMode = Literal["author", "display", "restricted"]

AUTHOR: ViewMode = "author"
DISPLAY: ViewMode = "display"
RESTRICTED: ViewMode = "restricted"
VIEW_MODES = (AUTHOR, DISPLAY, RESTRICTED)


@dataclass
class SelectionState:
    selected: List[str] = field(default_factory=list)
    deselected: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.selected and not self.deselected

    def to_dict(self) -> Dict[str, List[str]]:
        return {"selected": list(self.selected), "deselected": list(self.deselected)}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SelectionState":
        data = data or {}
        return cls(
            selected=[str(k) for k in data.get("selected") or []],
            deselected=[str(k) for k in data.get("deselected") or []],
        )


@dataclass
class StatsConfig:
    """Les trois partitions d'une configuration de partie."""
    info: SelectionState = field(default_factory=SelectionState)
    hitting: SelectionState = field(default_factory=SelectionState)
    pitching: SelectionState = field(default_factory=SelectionState)

    def get(self, namespace: str) -> SelectionState:
        mapping_for(namespace)
        return getattr(self, namespace)

    def with_namespace(self, namespace: str, state: SelectionState) -> "StatsConfig":
        """Copie de la config avec la partition `namespace` remplacée."""
        mapping_for(namespace)
        parts = {ns: self.get(ns) for ns in NAMESPACES}
        parts[namespace] = state
        return StatsConfig(**parts)

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        return {ns: self.get(ns).to_dict() for ns in NAMESPACES}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "StatsConfig":
        data = data or {}
        return cls(**{ns: SelectionState.from_dict(data.get(ns)) for ns in NAMESPACES})


# ---------------------------------------------------------------------------
# Ordre & jeu de clés
# ---------------------------------------------------------------------------
def sorted_keys(namespace: str, record: Mapping[str, Any], *, mapped_only: bool = True) -> List[str]:
    """
    Trie les clés d'un enregistrement selon la priorité de la table d'affichage.
    Les clés sans priorité explicite passent en dernier (ordre d'origine conservé).
    """
    mappings = mapping_for(namespace)
    keys = [k for k in record.keys() if not mapped_only or k in mappings]

    def _priority(key: str):
        mapping = mappings.get(key)
        order = mapping.order if mapping else None
        return (1, 0) if order is None else (0, order)

    return sorted(keys, key=_priority)


def full_key_set(
    namespace: str,
    records: Union[Mapping[str, Any], Sequence[Mapping[str, Any]], None],
) -> List[str]:
    """
    Jeu de clés complet d'un namespace, découvert sur le premier enregistrement disponible.
    - info: toutes les clés de la fiche ;
    - hitting/pitching: uniquement les clés présentes dans la table d'affichage.
    """
    if records is None:
        return []
    if isinstance(records, Mapping):
        first: Mapping[str, Any] = records
    else:
        first = records[0] if len(records) else {}
    return sorted_keys(namespace, first, mapped_only=namespace != INFO)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
def _without(keys: Iterable[str], removed: Set[str]) -> List[str]:
    return [k for k in keys if k not in removed]


def _append_missing(keys: List[str], added: Iterable[str]) -> List[str]:
    out = list(keys)
    for key in added:
        if key not in out:
            out.append(key)
    return out


def initialize(state: SelectionState, full_keys: Sequence[str], namespace: str) -> SelectionState:
    """
    Politique par défaut d'un namespace jamais configuré (selected et deselected vides).
    - info: tout masqué (détails biographiques = spoilers) ;
    - hitting/pitching: tout révélé, limité aux clés ayant un mapping d'affichage.
    Un état déjà rempli est retourné tel quel (rechargements répétés du même joueur).
    """
    if not state.is_empty():
        return state
    if namespace == INFO:
        return SelectionState(selected=[], deselected=list(dict.fromkeys(full_keys)))
    mappings = mapping_for(namespace)
    mapped = [k for k in dict.fromkeys(full_keys) if k in mappings]
    return SelectionState(selected=mapped, deselected=[])


def toggle(
    state: SelectionState,
    key: str,
    full_keys: Optional[Sequence[str]] = None,
) -> SelectionState:
    """
    Bascule `key` de selected vers deselected (ou l'inverse).
    Les champs dépendants de `key` suivent du même côté, quel que soit leur état précédent.
    Une clé absente de `full_keys` (si fourni) laisse l'état inchangé.
    """
    if full_keys is not None and key not in full_keys:
        return SelectionState(list(state.selected), list(state.deselected))

    moving = [key] + [
        dep for dep in dependents_of(key)
        if full_keys is None or dep in full_keys
    ]
    moved = set(moving)
    selected = _without(state.selected, moved)
    deselected = _without(state.deselected, moved)

    if key in state.selected:
        deselected = _append_missing(deselected, moving)
    else:
        selected = _append_missing(selected, moving)
    return SelectionState(selected=selected, deselected=deselected)


def toggle_all(
    state: SelectionState,
    full_keys: Sequence[str],
    new_selected: Iterable[str],
) -> SelectionState:
    """
    Remplace la partition d'une section : `new_selected` devient selected, le complément
    (dans `full_keys`) devient deselected. Sélection vide → tout masqué.
    Une clé principale sélectionnée tire ses dépendants hors de deselected ; l'inverse
    n'est pas appliqué (un dépendant demandé seul reste sélectionné).
    """
    known = list(dict.fromkeys(full_keys))
    wanted = [k for k in dict.fromkeys(new_selected) if k in known]
    if not wanted:
        return SelectionState(selected=[], deselected=known)

    pulled: List[str] = []
    for key in wanted:
        pulled.extend(dep for dep in dependents_of(key) if dep in known)
    selected = _append_missing(wanted, pulled)
    chosen = set(selected)
    deselected = [k for k in known if k not in chosen]
    return SelectionState(selected=selected, deselected=deselected)


# ---------------------------------------------------------------------------
# Rendu
# ---------------------------------------------------------------------------
def _check_mode(mode: str) -> None:
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode {mode!r}")


def visible_keys(full_keys: Sequence[str], state: SelectionState, mode: str) -> List[str]:
    """
    Colonnes à rendre.
    - author/display: toutes sauf les champs dépendants (jamais en colonne autonome) ;
    - restricted: uniquement les clés sélectionnées, toujours sans les dépendants.
    """
    _check_mode(mode)
    hidden = dependent_keys()
    if mode in (AUTHOR, DISPLAY):
        return [k for k in full_keys if k not in hidden]
    chosen = set(state.selected)
    return [k for k in full_keys if k in chosen and k not in hidden]


def filter_visible_record(
    record: Mapping[str, Any],
    state: SelectionState,
    mode: str,
) -> Dict[str, Any]:
    """
    Valeurs exposées d'un enregistrement. En mode restricted, seules les clés sélectionnées
    sont conservées, plus les dépendants dont la clé principale est sélectionnée.
    """
    _check_mode(mode)
    if mode in (AUTHOR, DISPLAY):
        return dict(record)
    chosen = set(state.selected)
    attached = {dep for key in chosen for dep in dependents_of(key)}
    return {k: v for k, v in record.items() if k in chosen or k in attached}


def reveal_event(previous: Iterable[str], current: Iterable[str]) -> Set[str]:
    """Clés présentes dans `current` et absentes de `previous`."""
    return set(current) - set(previous)
