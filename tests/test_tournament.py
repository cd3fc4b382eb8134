"""
Unit tests — tournament-day rules (pure, no app or database).

Coverage:
  - settings bounds and parsing from a request body
  - walk-in entrants
  - random team assignment into balanced teams
  - round-robin pairing and court/time-slot layout
  - final scores and standings order
"""
from __future__ import annotations

import random
from datetime import time
from itertools import combinations

import pytest

from hoopfund.domain import AgeCategory, ValidationError
from hoopfund.domain.tournament import (GameResult, TournamentSettings,
                                        assign_teams, build_schedule,
                                        compute_standings, final_score,
                                        round_robin, schedule_minutes,
                                        team_names, walk_in)


# ─────────────────────────── Settings ─────────────────────────────────────────

class TestSettings:
    def test_defaults_match_three_on_three_day(self) -> None:
        s = TournamentSettings()
        assert (s.court_count, s.game_length_minutes) == (2, 15)
        assert (s.min_players_per_team, s.max_players_per_team) == (3, 4)
        assert s.slot_start(0) == time(8, 0)
        assert s.slot_start(3) == time(9, 0)

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"court_count": 0}, "court_count"),
            ({"game_length_minutes": 2}, "game_length_minutes"),
            ({"max_players_per_team": 5}, "max_players_per_team"),
            ({"min_players_per_team": 4, "max_players_per_team": 3}, "min_players_per_team"),
        ],
    )
    def test_out_of_range(self, kwargs, field: str) -> None:
        with pytest.raises(ValidationError) as exc:
            TournamentSettings(**kwargs)
        assert exc.value.field == field

    def test_from_mapping(self) -> None:
        s = TournamentSettings.from_mapping({"court_count": "3", "first_game_at": "9:30", "name": "ignored"})
        assert s.court_count == 3
        assert s.first_game_at == time(9, 30)
        assert s.game_length_minutes == 15

    @pytest.mark.parametrize(
        "body, field",
        [
            ({"court_count": "two"}, "court_count"),
            ({"court_count": True}, "court_count"),
            ({"first_game_at": "noon"}, "first_game_at"),
        ],
    )
    def test_from_mapping_rejects_garbage(self, body, field: str) -> None:
        with pytest.raises(ValidationError) as exc:
            TournamentSettings.from_mapping(body)
        assert exc.value.field == field


# ─────────────────────────── Walk-ins ─────────────────────────────────────────

class TestWalkIn:
    def test_age_sets_category(self) -> None:
        e = walk_in({"name": " Sam Lee ", "age": "12", "phone": "512-555-0100"})
        assert e.name == "Sam Lee"
        assert e.age_category is AgeCategory.MIDDLE_SCHOOL
        assert e.walk_in is True

    def test_category_without_age(self) -> None:
        assert walk_in({"name": "Sam Lee", "age_category": "High-School-Adult"}).age_category is (
            AgeCategory.HIGH_SCHOOL_ADULT
        )

    def test_optional_fields_blank(self) -> None:
        e = walk_in({"name": "Sam Lee", "phone": "", "grade_level": ""})
        assert e.phone is None
        assert e.grade_level is None
        assert e.age_category is None

    @pytest.mark.parametrize(
        "body, field",
        [
            ({"name": "S"}, "name"),
            ({"name": "Sam Lee", "phone": "call me"}, "phone"),
            ({"name": "Sam Lee", "age": "twelve"}, "age"),
            ({"name": "Sam Lee", "age": 8}, "age"),
            ({"name": "Sam Lee", "age_category": "toddler"}, "age_category"),
        ],
    )
    def test_rejected(self, body, field: str) -> None:
        with pytest.raises(ValidationError) as exc:
            walk_in(body)
        assert exc.value.field == field


# ─────────────────────────── Team assignment ──────────────────────────────────

class TestAssignTeams:
    def test_balanced_and_complete(self) -> None:
        people = [f"p{i}" for i in range(10)]
        teams = assign_teams(people, TournamentSettings(), random.Random(4))
        assert sorted(len(t) for t in teams) == [3, 3, 4]
        assert sorted(p for t in teams for p in t) == sorted(people)

    def test_same_seed_same_teams(self) -> None:
        people = list(range(8))
        s = TournamentSettings()
        assert assign_teams(people, s, random.Random(7)) == assign_teams(people, s, random.Random(7))

    def test_input_is_not_reordered(self) -> None:
        people = list(range(8))
        assign_teams(people, TournamentSettings(), random.Random(1))
        assert people == list(range(8))

    def test_too_few_for_two_teams(self) -> None:
        with pytest.raises(ValidationError, match="At least 6 players"):
            assign_teams(list(range(5)), TournamentSettings())

    def test_split_below_minimum(self) -> None:
        strict = TournamentSettings(min_players_per_team=4, max_players_per_team=4)
        with pytest.raises(ValidationError, match="cannot be split"):
            assign_teams(list(range(10)), strict)

    def test_team_names(self) -> None:
        names = team_names(10)
        assert names[:3] == ["Lightning", "Thunder", "Storm"]
        assert names[8:] == ["Team 9", "Team 10"]


# ─────────────────────────── Round robin ──────────────────────────────────────

class TestRoundRobin:
    def test_even_field(self) -> None:
        rounds = round_robin(["A", "B", "C", "D"])
        assert len(rounds) == 3
        assert all(len(r) == 2 for r in rounds)
        pairs = [frozenset(p) for r in rounds for p in r]
        assert len(pairs) == 6
        assert set(pairs) == {frozenset(c) for c in combinations("ABCD", 2)}

    def test_nobody_plays_twice_in_a_round(self) -> None:
        for r in round_robin(list(range(8))):
            seen = [t for pair in r for t in pair]
            assert len(seen) == len(set(seen))

    def test_odd_field_gets_one_bye_each(self) -> None:
        teams = ["A", "B", "C", "D", "E"]
        rounds = round_robin(teams)
        assert len(rounds) == 5
        assert sum(len(r) for r in rounds) == 10
        for team in teams:
            sitting_out = [r for r in rounds if all(team not in pair for pair in r)]
            assert len(sitting_out) == 1

    @pytest.mark.parametrize("teams", [[], ["A"], ["A", "A", "B"]])
    def test_rejected(self, teams) -> None:
        with pytest.raises(ValidationError):
            round_robin(teams)


class TestBuildSchedule:
    def test_four_teams_two_courts(self) -> None:
        games = build_schedule([1, 2, 3, 4], TournamentSettings())
        assert [g.number for g in games] == [1, 2, 3, 4, 5, 6]
        assert [g.court for g in games] == [1, 2, 1, 2, 1, 2]
        assert [g.starts_at for g in games] == [
            time(8, 0), time(8, 0), time(8, 20), time(8, 20), time(8, 40), time(8, 40),
        ]
        assert schedule_minutes(games, TournamentSettings()) == 60

    def test_round_spills_over_courts_without_double_booking(self) -> None:
        games = build_schedule(list(range(6)), TournamentSettings(court_count=2))
        assert len(games) == 15
        by_slot = {}
        for g in games:
            by_slot.setdefault(g.slot, []).extend([g.team_a, g.team_b])
        assert len(by_slot) == 10
        assert all(len(teams) == len(set(teams)) for teams in by_slot.values())
        assert all(g.court <= 2 for g in games)

    def test_single_court_odd_field(self) -> None:
        s = TournamentSettings(court_count=1, game_length_minutes=10, first_game_at=time(9, 0))
        games = build_schedule(["A", "B", "C"], s)
        assert [g.round for g in games] == [1, 2, 3]
        assert [g.starts_at for g in games] == [time(9, 0), time(9, 15), time(9, 30)]


# ─────────────────────────── Scores + standings ───────────────────────────────

class TestFinalScore:
    def test_accepts_strings(self) -> None:
        assert final_score("21", 18) == (21, 18)

    @pytest.mark.parametrize(
        "a, b, field",
        [
            (20, 20, "score_b"),
            (None, 10, "score_a"),
            ("-1", 10, "score_a"),
            (-1, 10, "score_a"),
            (True, 10, "score_a"),
            (21, 201, "score_b"),
        ],
    )
    def test_rejected(self, a, b, field: str) -> None:
        with pytest.raises(ValidationError) as exc:
            final_score(a, b)
        assert exc.value.field == field


class TestStandings:
    TEAMS = [(1, "Aces"), (2, "Bricks"), (3, "Cyclones")]

    def test_three_way_split_decided_by_differential(self) -> None:
        results = [
            GameResult(1, 2, 21, 10),
            GameResult(2, 3, 15, 12),
            GameResult(3, 1, 20, 18),
        ]
        table = compute_standings(self.TEAMS, results)
        assert [s.name for s in table] == ["Aces", "Cyclones", "Bricks"]
        assert [s.rank for s in table] == [1, 2, 3]
        assert [s.point_differential for s in table] == [9, -1, -8]
        assert all(s.win_percentage == 0.5 for s in table)

    def test_wins_come_first(self) -> None:
        results = [GameResult(1, 2, 11, 10), GameResult(3, 2, 40, 5), GameResult(1, 3, 12, 10)]
        table = compute_standings(self.TEAMS, results)
        assert [(s.name, s.wins, s.losses) for s in table] == [
            ("Aces", 2, 0),
            ("Cyclones", 1, 1),
            ("Bricks", 0, 2),
        ]
        assert table[0].as_dict()["win_percentage"] == 1.0

    def test_level_teams_share_rank(self) -> None:
        table = compute_standings([(2, "Zebras"), (1, "Aces"), (3, "Moose")], [GameResult(3, 1, 10, 8)])
        assert [(s.name, s.rank) for s in table] == [("Moose", 1), ("Zebras", 2), ("Aces", 3)]
        table = compute_standings([(2, "Zebras"), (1, "aces")], [])
        assert [(s.name, s.rank) for s in table] == [("aces", 1), ("Zebras", 1)]
        assert table[0].win_percentage == 0.0

    def test_win_percentage_rounded_in_output(self) -> None:
        results = [GameResult(1, 2, 5, 3), GameResult(1, 3, 5, 3), GameResult(3, 1, 9, 1)]
        row = compute_standings(self.TEAMS, results)[0].as_dict()
        assert row["team_id"] == 1
        assert row["games_played"] == 3
        assert row["win_percentage"] == 0.667

    def test_unknown_team(self) -> None:
        with pytest.raises(ValidationError) as exc:
            compute_standings(self.TEAMS, [GameResult(1, 9, 10, 8)])
        assert exc.value.field == "team"
