# hoopfund/services/tournaments.py
"""Tournament-day operations on stored tournaments.

Flow: create -> import registered players / add walk-ins -> assign teams
(random or by hand) -> generate the round-robin schedule -> start games and
record final scores. Standings are always computed from completed games.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any, List, Optional

from sqlalchemy import select

from hoopfund import domain
from hoopfund.domain import tournament as rules
from hoopfund.extensions import db
from hoopfund.models import Entrant, Game, Player, Team, Tournament, TournamentTeam
from hoopfund.models.mixins import utcnow_naive

log = logging.getLogger(__name__)

TS = rules.TournamentStatus

# Registrations whose players are expected on the court.
PLAYING_STATUSES = (
    domain.RegistrationStatus.PAYMENT_COMPLETED.value,
    domain.RegistrationStatus.APPROVED.value,
)


def _conflict(t: Tournament, action: str, message: str) -> domain.InvalidTransition:
    return domain.InvalidTransition(t.status, action, message)


def _require_open_roster(t: Tournament, action: str) -> None:
    if not t.status_enum.roster_open:
        raise _conflict(t, action, "The schedule is set; rosters can no longer change.")


def _refresh_roster_status(t: Tournament) -> None:
    if not t.entrants:
        t.status = TS.SETUP.value
    elif t.teams and all(e.team is not None for e in t.entrants):
        t.status = TS.TEAMS_ASSIGNED.value
    else:
        t.status = TS.REGISTRATION.value


# ----------------------------
# Tournaments
# ----------------------------
def create_tournament(
    name: Any,
    settings: rules.TournamentSettings,
    *,
    event_date: Optional[date] = None,
) -> Tournament:
    name = str(name or "").strip()
    if not domain.validate_name(name):
        raise domain.ValidationError("name", "Tournament name must be at least 2 characters.")
    row = Tournament(name=name, event_date=event_date, status=TS.SETUP.value)
    row.apply_settings(settings)
    db.session.add(row)
    db.session.commit()
    log.info("tournament %s created (%s)", row.id, row.name)
    return row


def get_tournament(tournament_id: int) -> Tournament:
    row = db.session.get(Tournament, int(tournament_id))
    if row is None:
        raise domain.NotFound("tournament", tournament_id)
    return row


def list_tournaments() -> List[Tournament]:
    stmt = select(Tournament).order_by(Tournament.created_at.desc(), Tournament.id.desc())
    return list(db.session.execute(stmt).scalars())


def _entrant(t: Tournament, entrant_id: int) -> Entrant:
    row = db.session.get(Entrant, int(entrant_id))
    if row is None or row.tournament_id != t.id:
        raise domain.NotFound("entrant", entrant_id)
    return row


def _team(t: Tournament, team_id: int) -> TournamentTeam:
    row = db.session.get(TournamentTeam, int(team_id))
    if row is None or row.tournament_id != t.id:
        raise domain.NotFound("tournament team", team_id)
    return row


def _game(t: Tournament, game_id: int) -> Game:
    row = db.session.get(Game, int(game_id))
    if row is None or row.tournament_id != t.id:
        raise domain.NotFound("game", game_id)
    return row


# ----------------------------
# Entrants
# ----------------------------
def import_registered_players(tournament_id: int) -> int:
    """Copy players from paid or approved registrations; returns how many were added."""
    t = get_tournament(tournament_id)
    _require_open_roster(t, "import")

    known = {e.player_id for e in t.entrants if e.player_id is not None}
    stmt = (
        select(Player, Team.name)
        .join(Team, Player.team_id == Team.id)
        .where(Team.status.in_(PLAYING_STATUSES))
        .order_by(Team.id, Player.id)
    )
    added = 0
    for player, team_name in db.session.execute(stmt):
        if player.id in known:
            continue
        t.entrants.append(
            Entrant(
                player_id=player.id,
                name=player.player_name,
                age_category=player.age_category,
                registered_team=team_name,
                walk_in=False,
            )
        )
        added += 1

    if added:
        _refresh_roster_status(t)
    db.session.commit()
    log.info("tournament %s: imported %s registered players", t.id, added)
    return added


def add_walk_in(tournament_id: int, entrant: rules.Entrant) -> Entrant:
    t = get_tournament(tournament_id)
    _require_open_roster(t, "walk_in")
    row = Entrant.from_domain(entrant)
    t.entrants.append(row)
    _refresh_roster_status(t)
    db.session.commit()
    log.info("tournament %s: walk-in %s added", t.id, row.id)
    return row


def remove_entrant(tournament_id: int, entrant_id: int) -> None:
    t = get_tournament(tournament_id)
    _require_open_roster(t, "remove_entrant")
    row = _entrant(t, entrant_id)
    t.entrants.remove(row)
    _refresh_roster_status(t)
    db.session.commit()


# ----------------------------
# Teams
# ----------------------------
def assign_teams(tournament_id: int, *, seed: Optional[int] = None) -> Tournament:
    """Reshuffle every entrant into fresh teams named from the default list."""
    t = get_tournament(tournament_id)
    _require_open_roster(t, "assign_teams")

    groups = rules.assign_teams(list(t.entrants), t.settings, random.Random(seed))
    for e in t.entrants:
        e.team = None
    t.teams.clear()
    db.session.flush()

    for position, (name, members) in enumerate(zip(rules.team_names(len(groups)), groups)):
        team = TournamentTeam(name=name, position=position)
        t.teams.append(team)
        for e in members:
            e.team = team

    t.status = TS.TEAMS_ASSIGNED.value
    db.session.commit()
    log.info("tournament %s: %s entrants assigned to %s teams", t.id, len(t.entrants), len(groups))
    return t


def add_team(tournament_id: int, name: Any = None) -> TournamentTeam:
    t = get_tournament(tournament_id)
    _require_open_roster(t, "add_team")
    name = str(name or "").strip() or rules.team_names(len(t.teams) + 1)[-1]
    if not domain.validate_name(name):
        raise domain.ValidationError("name", "Team name must be at least 2 characters.")
    team = TournamentTeam(name=name, position=len(t.teams))
    t.teams.append(team)
    _refresh_roster_status(t)
    db.session.commit()
    return team


def rename_team(tournament_id: int, team_id: int, name: Any) -> TournamentTeam:
    t = get_tournament(tournament_id)
    team = _team(t, team_id)
    name = str(name or "").strip()
    if not domain.validate_name(name):
        raise domain.ValidationError("name", "Team name must be at least 2 characters.")
    team.name = name
    db.session.commit()
    return team


def move_entrant(tournament_id: int, entrant_id: int, team_id: Optional[int]) -> Entrant:
    """Put an entrant on a team, or back in the unassigned pool with ``None``."""
    t = get_tournament(tournament_id)
    _require_open_roster(t, "move_entrant")
    row = _entrant(t, entrant_id)

    if team_id is None:
        row.team = None
    else:
        team = _team(t, team_id)
        if row.team is not team:
            if len(team.members) >= t.max_players_per_team:
                raise domain.ValidationError(
                    "team_id", f"{team.name} already has {t.max_players_per_team} players."
                )
            row.team = team

    _refresh_roster_status(t)
    db.session.commit()
    return row


# ----------------------------
# Schedule + scores
# ----------------------------
def generate_schedule(tournament_id: int) -> Tournament:
    """Round-robin across the configured courts; replaces an unplayed schedule."""
    t = get_tournament(tournament_id)
    if t.status_enum not in (TS.TEAMS_ASSIGNED, TS.SCHEDULED):
        raise _conflict(t, "schedule", "Assign every entrant to a team before scheduling.")

    settings = t.settings
    short = [team.name for team in t.teams if len(team.members) < settings.min_players_per_team]
    if short:
        raise domain.ValidationError(
            "teams", f"Teams need at least {settings.min_players_per_team} players: {', '.join(short)}."
        )

    plan = rules.build_schedule([team.id for team in t.teams], settings)
    t.games.clear()
    db.session.flush()
    for g in plan:
        t.games.append(
            Game(
                number=g.number,
                round=g.round,
                court=g.court,
                starts_at=g.starts_at,
                team_a_id=g.team_a,
                team_b_id=g.team_b,
                status=rules.GameStatus.SCHEDULED.value,
            )
        )
    t.status = TS.SCHEDULED.value
    db.session.commit()
    log.info(
        "tournament %s: %s games over %s minutes",
        t.id,
        len(plan),
        rules.schedule_minutes(plan, settings),
    )
    return t


def start_game(tournament_id: int, game_id: int) -> Game:
    t = get_tournament(tournament_id)
    game = _game(t, game_id)
    if game.status == rules.GameStatus.COMPLETED.value:
        raise _conflict(t, "start_game", f"Game {game.number} is already final.")
    game.status = rules.GameStatus.IN_PROGRESS.value
    t.status = TS.IN_PROGRESS.value
    db.session.commit()
    return game


def record_score(tournament_id: int, game_id: int, score_a: Any, score_b: Any) -> Game:
    """Store a final score; re-recording a final game corrects it."""
    t = get_tournament(tournament_id)
    game = _game(t, game_id)
    a, b = rules.final_score(score_a, score_b)

    if game.status == rules.GameStatus.COMPLETED.value:
        log.info(
            "tournament %s: game %s corrected from %s-%s to %s-%s",
            t.id,
            game.number,
            game.score_a,
            game.score_b,
            a,
            b,
        )
    game.score_a, game.score_b = a, b
    game.status = rules.GameStatus.COMPLETED.value
    game.completed_at = utcnow_naive()

    done = all(g.status == rules.GameStatus.COMPLETED.value for g in t.games)
    t.status = (TS.COMPLETED if done else TS.IN_PROGRESS).value
    db.session.commit()
    if done:
        log.info("tournament %s completed; champion %s", t.id, t.standings()[0].name)
    return game


__all__ = [
    "create_tournament",
    "get_tournament",
    "list_tournaments",
    "import_registered_players",
    "add_walk_in",
    "remove_entrant",
    "assign_teams",
    "add_team",
    "rename_team",
    "move_entrant",
    "generate_schedule",
    "start_game",
    "record_score",
]
