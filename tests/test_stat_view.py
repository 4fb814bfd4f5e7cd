import pytest

from statguess.services.stat_view import (
    build_info_section,
    build_player_view,
    build_stats_section,
    default_tab,
    format_value,
)
from statguess.services.stats_client import GENERIC_HEADSHOT_URL, PlayerData
from statguess.services.visibility import AUTHOR, DISPLAY, RESTRICTED, SelectionState, StatsConfig


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (0.0, "0"), (None, "-"), ("", "-"), (True, "Yes"), (False, "No"), (".300", ".300"), (42, "42")],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_zero_renders_as_zero_in_restricted_mode(trout):
    selection = SelectionState(selected=["season", "caughtStealing"], deselected=["homeRuns"])
    section = build_stats_section("hitting", trout.hitting, selection, RESTRICTED)

    assert [c["key"] for c in section["columns"]] == ["season", "caughtStealing"]
    first_row = section["rows"][0]
    assert first_row[1] == {"key": "caughtStealing", "value": "0", "detail": None}


def test_team_details_attached_as_detail():
    player = PlayerData(
        player_id=1,
        full_name="Traded Guy",
        image_url="http://img/1",
        hitting=[{"season": "2019", "team": "2 Teams", "teamDetails": "A, B", "homeRuns": 0}],
    )
    section = build_stats_section("hitting", player.hitting, SelectionState(), DISPLAY)

    assert [c["key"] for c in section["columns"]] == ["season", "team", "homeRuns"]
    team_cell = section["rows"][0][1]
    assert team_cell == {"key": "team", "value": "2 Teams", "detail": "A, B"}


def test_info_section_groups_and_author_state(trout):
    selection = SelectionState(selected=["team", "teamDetails"], deselected=["age", "birthPlace"])
    section = build_info_section(trout.info, selection, AUTHOR, frozenset({"team"}))

    fields = {f["key"]: f for f in section["fields"]}
    assert "teamDetails" not in fields
    assert fields["team"]["state"] == "selected"
    assert fields["team"]["highlight"] is True
    assert fields["age"]["state"] == "deselected"
    assert fields["lastPlayedDate"]["value"] == "-"
    assert fields["active"]["value"] == "Yes"

    (group,) = section["groups"]
    assert group["key"] == "birthPlace"
    assert [f["label"] for f in group["fields"]] == ["City", "State / Province", "Country"]


def test_restricted_view_hides_identity_and_empty_sections(trout):
    config = StatsConfig(info=SelectionState(deselected=list(trout.info)))
    view = build_player_view(trout, config, RESTRICTED)

    assert view["player"] == {"id": None, "fullName": None, "imageUrl": GENERIC_HEADSHOT_URL}
    assert view["info"]["visible"] is False
    assert view["info"]["fields"] == []
    assert view["hitting"]["visible"] is False
    assert view["defaultTab"] is None
    assert view["nothingSelected"] is True


def test_display_view_reveals_identity(trout):
    view = build_player_view(trout, StatsConfig(), DISPLAY)

    assert view["player"]["fullName"] == "Mike Trout"
    assert view["defaultTab"] == "hitting"
    assert view["nothingSelected"] is False
    assert len(view["hitting"]["rows"]) == 2


def test_default_tab_prefers_pitching_for_pitchers():
    pitcher = PlayerData(player_id=2, full_name="Ace", image_url="", primary_position="Pitcher")
    batter = PlayerData(player_id=3, full_name="Bat", image_url="", primary_position="Outfielder")

    assert default_tab(pitcher, True, True) == "pitching"
    assert default_tab(pitcher, True, False) == "hitting"
    assert default_tab(batter, True, True) == "hitting"
    assert default_tab(batter, False, True) == "pitching"
    assert default_tab(batter, False, False) is None
