import pytest

from statguess.services.stat_mappings import HITTING, INFO, PITCHING, mapping_for
from statguess.services.visibility import (
    AUTHOR,
    DISPLAY,
    RESTRICTED,
    SelectionState,
    StatsConfig,
    filter_visible_record,
    full_key_set,
    initialize,
    reveal_event,
    sorted_keys,
    toggle,
    toggle_all,
    visible_keys,
)

INFO_KEYS = ["age", "team", "teamDetails"]


def _sides(state: SelectionState, key: str) -> str:
    if key in state.selected:
        return "selected"
    if key in state.deselected:
        return "deselected"
    return "none"


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "namespace, full_keys",
    [
        (INFO, ["age", "position", "team", "teamDetails", "birthPlace"]),
        (HITTING, ["season", "team", "teamDetails", "homeRuns", "avg", "awards"]),
        (PITCHING, ["season", "team", "teamDetails", "wins", "era"]),
    ],
)
def test_initialize_partitions_mapped_keys(namespace, full_keys):
    state = initialize(SelectionState(), full_keys + ["notMapped"], namespace)
    mapped = {k for k in full_keys if k in mapping_for(namespace)}
    if namespace == INFO:
        # fiche : toutes les clés du jeu complet, masquées
        assert set(state.deselected) == set(full_keys) | {"notMapped"}
        assert state.selected == []
    else:
        assert set(state.selected) | set(state.deselected) == mapped
    assert not set(state.selected) & set(state.deselected)


def test_info_scenario_initialize_then_toggle_team_twice():
    state = initialize(SelectionState(), INFO_KEYS, INFO)
    assert state.selected == []
    assert set(state.deselected) == {"age", "team", "teamDetails"}

    state = toggle(state, "team", INFO_KEYS)
    assert set(state.selected) == {"team", "teamDetails"}
    assert state.deselected == ["age"]

    state = toggle(state, "team", INFO_KEYS)
    assert state.selected == []
    assert set(state.deselected) == {"age", "team", "teamDetails"}


def test_hitting_scenario_default_on():
    state = initialize(SelectionState(), ["avg", "homeRuns"], HITTING)
    assert state.selected == ["avg", "homeRuns"]
    assert state.deselected == []


def test_initialize_keeps_existing_configuration():
    existing = SelectionState(selected=["avg"], deselected=["homeRuns"])
    assert initialize(existing, ["avg", "homeRuns"], HITTING) is existing


# ---------------------------------------------------------------------------
# Toggle
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "start",
    [
        SelectionState(selected=["team"], deselected=["teamDetails", "age"]),
        SelectionState(selected=["teamDetails"], deselected=["team", "age"]),
        SelectionState(selected=["team", "teamDetails"], deselected=["age"]),
        SelectionState(selected=[], deselected=["team", "teamDetails", "age"]),
        SelectionState(),
    ],
)
def test_toggle_team_keeps_team_details_on_same_side(start):
    state = toggle(start, "team", INFO_KEYS)
    assert _sides(state, "team") == _sides(state, "teamDetails")
    assert _sides(state, "team") != "none"
    assert not set(state.selected) & set(state.deselected)


def test_toggle_unknown_key_is_noop():
    start = SelectionState(selected=["age"], deselected=["team", "teamDetails"])
    state = toggle(start, "shoeSize", INFO_KEYS)
    assert state == start
    assert state is not start


def test_toggle_plain_key_moves_only_that_key():
    start = SelectionState(selected=["avg", "homeRuns"], deselected=[])
    state = toggle(start, "avg", ["avg", "homeRuns"])
    assert state.selected == ["homeRuns"]
    assert state.deselected == ["avg"]


# ---------------------------------------------------------------------------
# Toggle all
# ---------------------------------------------------------------------------
def test_toggle_all_empty_selection_deselects_everything():
    full = ["season", "team", "teamDetails", "homeRuns"]
    state = toggle_all(SelectionState(selected=full), full, [])
    assert state.selected == []
    assert state.deselected == full


def test_toggle_all_with_team_pulls_team_details():
    full = ["season", "team", "teamDetails", "homeRuns"]
    state = toggle_all(SelectionState(deselected=full), full, ["team", "homeRuns"])
    assert "teamDetails" not in state.deselected
    assert set(state.selected) == {"team", "teamDetails", "homeRuns"}
    assert state.deselected == ["season"]


def test_toggle_all_lone_dependent_does_not_pull_primary():
    full = ["team", "teamDetails", "homeRuns"]
    state = toggle_all(SelectionState(), full, ["teamDetails"])
    assert state.selected == ["teamDetails"]
    assert "team" in state.deselected


def test_toggle_all_ignores_unknown_keys():
    full = ["avg", "homeRuns"]
    state = toggle_all(SelectionState(), full, ["avg", "bogus"])
    assert state.selected == ["avg"]
    assert state.deselected == ["homeRuns"]


# ---------------------------------------------------------------------------
# Reveal event
# ---------------------------------------------------------------------------
def test_reveal_event_is_set_difference():
    assert reveal_event({"a"}, {"a", "b"}) == {"b"}
    assert reveal_event({"a", "b"}, {"a", "b"}) == set()
    assert reveal_event({"a", "b"}, {"a"}) == set()


# ---------------------------------------------------------------------------
# Jeu de clés / ordre
# ---------------------------------------------------------------------------
def test_full_key_set_uses_first_record_and_mapping():
    seasons = [
        {"homeRuns": 10, "season": "2010", "unknownStat": 1, "team": "A", "teamDetails": "A"},
        {"season": "2011", "rbi": 50},
    ]
    assert full_key_set(HITTING, seasons) == ["season", "team", "teamDetails", "homeRuns"]
    assert full_key_set(HITTING, []) == []
    assert full_key_set(INFO, {"weight": 200, "age": 30}) == ["age", "weight"]


def test_sorted_keys_puts_unordered_keys_last():
    record = {"zzz": 1, "homeRuns": 2, "season": "2010"}
    assert sorted_keys(HITTING, record, mapped_only=False) == ["season", "homeRuns", "zzz"]


def test_unknown_namespace_rejected():
    with pytest.raises(ValueError):
        StatsConfig().get("fielding")


# ---------------------------------------------------------------------------
# Rendu
# ---------------------------------------------------------------------------
def test_visible_keys_by_mode():
    full = ["season", "team", "teamDetails", "homeRuns"]
    state = SelectionState(selected=["team", "teamDetails"], deselected=["season", "homeRuns"])
    assert visible_keys(full, state, AUTHOR) == ["season", "team", "homeRuns"]
    assert visible_keys(full, state, DISPLAY) == ["season", "team", "homeRuns"]
    assert visible_keys(full, state, RESTRICTED) == ["team"]
    with pytest.raises(ValueError):
        visible_keys(full, state, "spectator")


def test_filter_visible_record_restricted_keeps_attached_details():
    record = {"season": "2019", "team": "2 Teams", "teamDetails": "A, B", "homeRuns": 0}
    state = SelectionState(selected=["team", "homeRuns"], deselected=["season", "teamDetails"])
    assert filter_visible_record(record, state, RESTRICTED) == {
        "team": "2 Teams",
        "teamDetails": "A, B",
        "homeRuns": 0,
    }
    assert filter_visible_record(record, state, DISPLAY) == record


def test_stats_config_round_trips_through_dict():
    config = StatsConfig().with_namespace(HITTING, SelectionState(selected=["avg"], deselected=["homeRuns"]))
    assert StatsConfig.from_dict(config.to_dict()) == config
    assert config.info.is_empty()
