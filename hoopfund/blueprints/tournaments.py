"""
hoopfund tournament-day admin API
────────────────────────────────────────────────────────────
• GET  /api/admin/tournaments                                  → list
• POST /api/admin/tournaments                                  {name, event_date?, court_count?, ...}
• GET  /api/admin/tournaments/<id>                             → teams, entrants, games, standings
• POST /api/admin/tournaments/<id>/import                      → pull in paid/approved registered players
• POST /api/admin/tournaments/<id>/walk-ins                    {name, phone?, age? | age_category?, grade_level?}
• DELETE /api/admin/tournaments/<id>/entrants/<eid>
• POST /api/admin/tournaments/<id>/entrants/<eid>/move         {team_id | null}
• POST /api/admin/tournaments/<id>/assign-teams                {seed?}
• POST /api/admin/tournaments/<id>/teams                       {name?}
• POST /api/admin/tournaments/<id>/teams/<tid>/rename          {name}
• POST /api/admin/tournaments/<id>/schedule
• POST /api/admin/tournaments/<id>/games/<gid>/start
• POST /api/admin/tournaments/<id>/games/<gid>/score           {score_a, score_b}

All routes require ``Authorization: Bearer <token>``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from flask import Blueprint, g

from hoopfund import domain
from hoopfund.domain import tournament as rules
from hoopfund.extensions import csrf
from hoopfund.services import tournaments
from hoopfund.services.auth import require_admin

from .api_utils import json_ok, request_payload

log = logging.getLogger(__name__)

bp = Blueprint("tournaments", __name__, url_prefix="/api/admin/tournaments")
csrf.exempt(bp)


def _event_date(raw: Any) -> Optional[date]:
    if raw in (None, ""):
        return None
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise domain.ValidationError("event_date", "event_date must be a date like 2025-08-30.") from None


def _optional_id(raw: Any, field: str) -> Optional[int]:
    if raw in (None, ""):
        return None
    if isinstance(raw, bool) or not str(raw).strip().isdigit():
        raise domain.ValidationError(field, f"{field} must be a team id or null.")
    return int(raw)


def _detail(t, **extra):
    return json_ok({**extra, "tournament": t.as_dict()})


# ───────────────────────────────
# Tournaments
# ───────────────────────────────
@bp.get("")
@require_admin
def tournaments_list():
    rows = tournaments.list_tournaments()
    return json_ok(
        {
            "tournaments": [
                {
                    "id": t.id,
                    "name": t.name,
                    "status": t.status,
                    "event_date": t.event_date.isoformat() if t.event_date else None,
                }
                for t in rows
            ],
            "count": len(rows),
        }
    )


@bp.post("")
@require_admin
def create():
    payload = request_payload()
    t = tournaments.create_tournament(
        payload.get("name"),
        rules.TournamentSettings.from_mapping(payload),
        event_date=_event_date(payload.get("event_date")),
    )
    log.info("tournament %s created by %s", t.id, g.admin_subject)
    return json_ok({"tournament": t.as_dict()}, 201)


@bp.get("/<int:tournament_id>")
@require_admin
def detail(tournament_id: int):
    return _detail(tournaments.get_tournament(tournament_id))


# ───────────────────────────────
# Entrants
# ───────────────────────────────
@bp.post("/<int:tournament_id>/import")
@require_admin
def import_players(tournament_id: int):
    added = tournaments.import_registered_players(tournament_id)
    return _detail(tournaments.get_tournament(tournament_id), added=added)


@bp.post("/<int:tournament_id>/walk-ins")
@require_admin
def walk_in(tournament_id: int):
    row = tournaments.add_walk_in(tournament_id, rules.walk_in(request_payload()))
    return json_ok({"entrant": row.as_dict(), "status": row.tournament.status}, 201)


@bp.delete("/<int:tournament_id>/entrants/<int:entrant_id>")
@require_admin
def remove_entrant(tournament_id: int, entrant_id: int):
    tournaments.remove_entrant(tournament_id, entrant_id)
    return _detail(tournaments.get_tournament(tournament_id))


@bp.post("/<int:tournament_id>/entrants/<int:entrant_id>/move")
@require_admin
def move_entrant(tournament_id: int, entrant_id: int):
    team_id = _optional_id(request_payload().get("team_id"), "team_id")
    tournaments.move_entrant(tournament_id, entrant_id, team_id)
    return _detail(tournaments.get_tournament(tournament_id))


# ───────────────────────────────
# Teams
# ───────────────────────────────
@bp.post("/<int:tournament_id>/assign-teams")
@require_admin
def assign_teams(tournament_id: int):
    seed = request_payload().get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise domain.ValidationError("seed", "seed must be an integer.")
    return _detail(tournaments.assign_teams(tournament_id, seed=seed))


@bp.post("/<int:tournament_id>/teams")
@require_admin
def add_team(tournament_id: int):
    team = tournaments.add_team(tournament_id, request_payload().get("name"))
    return json_ok({"team": team.as_dict()}, 201)


@bp.post("/<int:tournament_id>/teams/<int:team_id>/rename")
@require_admin
def rename_team(tournament_id: int, team_id: int):
    team = tournaments.rename_team(tournament_id, team_id, request_payload().get("name"))
    return json_ok({"team": team.as_dict()})


# ───────────────────────────────
# Schedule + scores
# ───────────────────────────────
@bp.post("/<int:tournament_id>/schedule")
@require_admin
def schedule(tournament_id: int):
    return _detail(tournaments.generate_schedule(tournament_id))


@bp.post("/<int:tournament_id>/games/<int:game_id>/start")
@require_admin
def start_game(tournament_id: int, game_id: int):
    game = tournaments.start_game(tournament_id, game_id)
    return json_ok({"game": game.as_dict(), "status": game.tournament.status})


@bp.post("/<int:tournament_id>/games/<int:game_id>/score")
@require_admin
def score(tournament_id: int, game_id: int):
    payload = request_payload()
    game = tournaments.record_score(tournament_id, game_id, payload.get("score_a"), payload.get("score_b"))
    t = game.tournament
    return json_ok(
        {
            "game": game.as_dict(),
            "status": t.status,
            "standings": [s.as_dict() for s in t.standings()],
        }
    )
