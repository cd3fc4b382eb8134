# hoopfund/domain/tournament.py
# ──────────────────────────────────────────────────────────────────────────────
# Tournament-day rules: walk-in entrants, random team assignment, round-robin
# scheduling across courts, final scores and standings. Pure values in, pure
# values out; the tournament service persists the results.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import (Any, Dict, Final, Hashable, Iterable, List, Mapping,
                    Optional, Sequence, Tuple, TypeVar)

from .errors import ValidationError
from .types import MAX_TEAM_SIZE, AgeCategory
from .validation import validate_name, validate_phone

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

DEFAULT_TEAM_NAMES: Final[Tuple[str, ...]] = (
    "Lightning",
    "Thunder",
    "Storm",
    "Blaze",
    "Wolves",
    "Eagles",
    "Panthers",
    "Hawks",
)

# Turnover between games on the same court.
BREAK_MINUTES: Final[int] = 5
MAX_SCORE: Final[int] = 200


class TournamentStatus(str, Enum):
    SETUP = "setup"
    REGISTRATION = "registration"
    TEAMS_ASSIGNED = "teams_assigned"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def roster_open(self) -> bool:
        """Entrants and team membership can still change."""
        return self in (TournamentStatus.SETUP, TournamentStatus.REGISTRATION, TournamentStatus.TEAMS_ASSIGNED)


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ──────────────────────────────────────────────────────────────────────────────
# Settings
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TournamentSettings:
    court_count: int = 2
    game_length_minutes: int = 15
    max_players_per_team: int = MAX_TEAM_SIZE
    min_players_per_team: int = 3
    first_game_at: time = time(8, 0)

    def __post_init__(self) -> None:
        if not 1 <= self.court_count <= 16:
            raise ValidationError("court_count", "Court count must be between 1 and 16.")
        if not 5 <= self.game_length_minutes <= 120:
            raise ValidationError("game_length_minutes", "Game length must be between 5 and 120 minutes.")
        if not 1 <= self.max_players_per_team <= MAX_TEAM_SIZE:
            raise ValidationError(
                "max_players_per_team", f"Teams can have at most {MAX_TEAM_SIZE} players."
            )
        if not 1 <= self.min_players_per_team <= self.max_players_per_team:
            raise ValidationError(
                "min_players_per_team", "Minimum team size must be between 1 and the maximum team size."
            )

    @property
    def slot_minutes(self) -> int:
        return self.game_length_minutes + BREAK_MINUTES

    def slot_start(self, slot: int) -> time:
        start = datetime.combine(date(2000, 1, 1), self.first_game_at)
        return (start + timedelta(minutes=slot * self.slot_minutes)).time()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TournamentSettings":
        """Build from a request body; missing keys keep the defaults."""
        kwargs: Dict[str, Any] = {}
        for name in ("court_count", "game_length_minutes", "max_players_per_team", "min_players_per_team"):
            raw = data.get(name)
            if raw in (None, ""):
                continue
            kwargs[name] = _whole_number(raw, name)
        raw_time = data.get("first_game_at")
        if raw_time not in (None, ""):
            kwargs["first_game_at"] = parse_clock(raw_time, "first_game_at")
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "court_count": self.court_count,
            "game_length_minutes": self.game_length_minutes,
            "max_players_per_team": self.max_players_per_team,
            "min_players_per_team": self.min_players_per_team,
            "first_game_at": self.first_game_at.strftime("%H:%M"),
        }


def _whole_number(raw: Any, field: str) -> int:
    if isinstance(raw, bool):
        raise ValidationError(field, f"{field} must be a whole number.")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text.isdigit():
        raise ValidationError(field, f"{field} must be a whole number.")
    return int(text)


def parse_clock(raw: Any, field: str = "time") -> time:
    """``"08:00"`` / ``"8:30"`` on a 24-hour clock."""
    try:
        return datetime.strptime(str(raw).strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(field, f"{field} must be a time like 08:00.") from None


# ──────────────────────────────────────────────────────────────────────────────
# Entrants
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Entrant:
    """Someone playing on tournament day: a registered player or a walk-in."""

    name: str
    phone: Optional[str] = None
    age_category: Optional[AgeCategory] = None
    grade_level: Optional[str] = None
    walk_in: bool = True

    def __post_init__(self) -> None:
        if not validate_name(self.name):
            raise ValidationError("name", "Name must be at least 2 characters.")
        if self.phone and not validate_phone(self.phone):
            raise ValidationError("phone", "Please enter a valid phone number.")


def walk_in(data: Mapping[str, Any]) -> Entrant:
    """A walk-in from the check-in table; an age, when given, sets the category."""
    name = str(data.get("name") or "").strip()
    phone = str(data.get("phone") or "").strip() or None
    grade = str(data.get("grade_level") or "").strip() or None

    category: Optional[AgeCategory] = None
    raw_age = data.get("age")
    raw_category = data.get("age_category")
    if raw_age not in (None, ""):
        age = _whole_number(raw_age, "age")
        if not 10 <= age <= 100:
            raise ValidationError("age", "Age must be between 10 and 100.")
        category = AgeCategory.for_age(age)
    elif raw_category not in (None, ""):
        try:
            category = AgeCategory(str(raw_category).strip().lower())
        except ValueError:
            raise ValidationError("age_category", f"Unknown age category: {raw_category!r}") from None

    return Entrant(name=name, phone=phone, age_category=category, grade_level=grade, walk_in=True)


# ──────────────────────────────────────────────────────────────────────────────
# Team assignment
# ──────────────────────────────────────────────────────────────────────────────


def team_names(count: int) -> List[str]:
    return [DEFAULT_TEAM_NAMES[i] if i < len(DEFAULT_TEAM_NAMES) else f"Team {i + 1}" for i in range(count)]


def assign_teams(
    entrants: Sequence[T],
    settings: TournamentSettings,
    rng: Optional[random.Random] = None,
) -> List[List[T]]:
    """Shuffle everyone into the fewest teams that respect the size cap.

    Team sizes differ by at most one. Raises ValidationError when the pool is
    too small for two teams or a team would fall under the minimum.
    """
    needed = 2 * settings.min_players_per_team
    if len(entrants) < needed:
        raise ValidationError("entrants", f"At least {needed} players are needed to form two teams.")

    pool = list(entrants)
    (rng or random.Random()).shuffle(pool)
    count = max(2, math.ceil(len(pool) / settings.max_players_per_team))
    teams = [pool[i::count] for i in range(count)]
    if min(len(t) for t in teams) < settings.min_players_per_team:
        raise ValidationError(
            "entrants",
            f"{len(pool)} players cannot be split into teams of "
            f"{settings.min_players_per_team}-{settings.max_players_per_team}.",
        )
    return teams


# ──────────────────────────────────────────────────────────────────────────────
# Round-robin schedule
# ──────────────────────────────────────────────────────────────────────────────


def round_robin(teams: Sequence[K]) -> List[List[Tuple[K, K]]]:
    """Circle method: every pair meets once, nobody plays twice in a round.

    An odd field gets a bye each round, so rounds hold ``len(teams) // 2``
    games.
    """
    if len(teams) < 2:
        raise ValidationError("teams", "At least two teams are needed for a schedule.")
    if len(set(teams)) != len(teams):
        raise ValidationError("teams", "Teams must be distinct.")

    slots: List[Optional[K]] = list(teams)
    if len(slots) % 2:
        slots.append(None)
    n = len(slots)

    rounds: List[List[Tuple[K, K]]] = []
    for _ in range(n - 1):
        pairs = []
        for i in range(n // 2):
            a, b = slots[i], slots[n - 1 - i]
            if a is not None and b is not None:
                pairs.append((a, b))
        rounds.append(pairs)
        slots = [slots[0], slots[-1], *slots[1:-1]]
    return rounds


@dataclass(frozen=True)
class ScheduledGame:
    number: int
    round: int
    court: int
    slot: int
    team_a: Any
    team_b: Any
    starts_at: time


def build_schedule(teams: Sequence[K], settings: TournamentSettings) -> List[ScheduledGame]:
    """Lay the rounds out on the courts.

    A round that needs more courts than exist spills into the next time slot;
    slots never mix rounds, so a team is never booked twice at once.
    """
    games: List[ScheduledGame] = []
    slot = 0
    for round_no, pairs in enumerate(round_robin(teams), start=1):
        for start in range(0, len(pairs), settings.court_count):
            for court, (a, b) in enumerate(pairs[start:start + settings.court_count], start=1):
                games.append(
                    ScheduledGame(
                        number=len(games) + 1,
                        round=round_no,
                        court=court,
                        slot=slot,
                        team_a=a,
                        team_b=b,
                        starts_at=settings.slot_start(slot),
                    )
                )
            slot += 1
    return games


def schedule_minutes(games: Iterable[ScheduledGame], settings: TournamentSettings) -> int:
    slots = {g.slot for g in games}
    return len(slots) * settings.slot_minutes


# ──────────────────────────────────────────────────────────────────────────────
# Scores + standings
# ──────────────────────────────────────────────────────────────────────────────


def final_score(score_a: Any, score_b: Any) -> Tuple[int, int]:
    """Validate a final score. Basketball has no ties: overtime decides."""
    a = _score(score_a, "score_a")
    b = _score(score_b, "score_b")
    if a == b:
        raise ValidationError("score_b", "A game cannot end in a tie.")
    return a, b


def _score(raw: Any, field: str) -> int:
    if raw in (None, ""):
        raise ValidationError(field, f"{field} is required.")
    value = _whole_number(raw, field)
    if not 0 <= value <= MAX_SCORE:
        raise ValidationError(field, f"{field} must be between 0 and {MAX_SCORE}.")
    return value


@dataclass(frozen=True)
class GameResult:
    team_a: Any
    team_b: Any
    score_a: int
    score_b: int

    @property
    def winner(self) -> Any:
        return self.team_a if self.score_a > self.score_b else self.team_b


@dataclass
class Standing:
    team_id: Any
    name: str
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    rank: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def point_differential(self) -> int:
        return self.points_for - self.points_against

    @property
    def win_percentage(self) -> float:
        return self.wins / self.games_played if self.games_played else 0.0

    def sort_key(self) -> Tuple[int, int, int, str]:
        return -self.wins, -self.point_differential, -self.points_for, self.name.casefold()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "team_id": self.team_id,
            "name": self.name,
            "wins": self.wins,
            "losses": self.losses,
            "games_played": self.games_played,
            "points_for": self.points_for,
            "points_against": self.points_against,
            "point_differential": self.point_differential,
            "win_percentage": round(self.win_percentage, 3),
        }


def compute_standings(teams: Iterable[Tuple[Any, str]], results: Iterable[GameResult]) -> List[Standing]:
    """Wins, then point differential, then points scored; name breaks display order.

    Teams level on all three counters share a rank (1, 2, 2, 4).
    """
    table: Dict[Any, Standing] = {}
    for team_id, name in teams:
        table[team_id] = Standing(team_id=team_id, name=name)

    for r in results:
        try:
            a, b = table[r.team_a], table[r.team_b]
        except KeyError as e:
            raise ValidationError("team", f"Result references unknown team {e.args[0]!r}") from None
        a.points_for += r.score_a
        a.points_against += r.score_b
        b.points_for += r.score_b
        b.points_against += r.score_a
        winner, loser = (a, b) if r.winner == r.team_a else (b, a)
        winner.wins += 1
        loser.losses += 1

    ordered = sorted(table.values(), key=Standing.sort_key)
    for i, row in enumerate(ordered):
        prev = ordered[i - 1] if i else None
        if prev is not None and prev.sort_key()[:3] == row.sort_key()[:3]:
            row.rank = prev.rank
        else:
            row.rank = i + 1
    return ordered


__all__ = [
    "DEFAULT_TEAM_NAMES",
    "BREAK_MINUTES",
    "MAX_SCORE",
    "TournamentStatus",
    "GameStatus",
    "TournamentSettings",
    "parse_clock",
    "Entrant",
    "walk_in",
    "team_names",
    "assign_teams",
    "round_robin",
    "ScheduledGame",
    "build_schedule",
    "schedule_minutes",
    "final_score",
    "GameResult",
    "Standing",
    "compute_standings",
]
