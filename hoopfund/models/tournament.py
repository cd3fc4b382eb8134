# ──────────────────────────────────────────────────────────────────────────────
# Tournament-day tables: the event with its settings, entrants (registered
# players and walk-ins), the teams they are assigned to, and the round-robin
# games with their final scores.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from sqlalchemy import (Boolean, Date, ForeignKey, Index, Integer, String,
                        Time, UniqueConstraint)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoopfund.domain import tournament as rules
from hoopfund.extensions import db

from .mixins import TimestampMixin, as_aware


class Tournament(db.Model, TimestampMixin):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    event_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=rules.TournamentStatus.SETUP.value,
        index=True,
    )

    # ── Settings ──────────────────────────────────────────────────
    court_count: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    game_length_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    max_players_per_team: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    min_players_per_team: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    first_game_at: Mapped[dt.time] = mapped_column(Time, nullable=False, default=dt.time(8, 0))

    # ── Relationships ─────────────────────────────────────────────
    entrants: Mapped[List["Entrant"]] = relationship(
        "Entrant",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="Entrant.id",
    )
    teams: Mapped[List["TournamentTeam"]] = relationship(
        "TournamentTeam",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="TournamentTeam.position",
    )
    games: Mapped[List["Game"]] = relationship(
        "Game",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="Game.number",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Tournament {self.name} ({self.status})>"

    @property
    def settings(self) -> rules.TournamentSettings:
        return rules.TournamentSettings(
            court_count=self.court_count,
            game_length_minutes=self.game_length_minutes,
            max_players_per_team=self.max_players_per_team,
            min_players_per_team=self.min_players_per_team,
            first_game_at=self.first_game_at,
        )

    @property
    def status_enum(self) -> rules.TournamentStatus:
        return rules.TournamentStatus(self.status)

    def apply_settings(self, settings: rules.TournamentSettings) -> None:
        self.court_count = settings.court_count
        self.game_length_minutes = settings.game_length_minutes
        self.max_players_per_team = settings.max_players_per_team
        self.min_players_per_team = settings.min_players_per_team
        self.first_game_at = settings.first_game_at

    def results(self) -> List[rules.GameResult]:
        return [g.result() for g in self.games if g.status == rules.GameStatus.COMPLETED.value]

    def standings(self) -> List[rules.Standing]:
        return rules.compute_standings(((t.id, t.name) for t in self.teams), self.results())

    def as_dict(self, *, private: bool = True) -> Dict[str, Any]:
        """``private=False`` leaves out entrant contact details for the public board."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "event_date": self.event_date.isoformat() if self.event_date else None,
            "status": self.status,
            "settings": self.settings.as_dict(),
            "teams": [t.as_dict(private=private) for t in self.teams],
            "games": [g.as_dict() for g in self.games],
            "standings": [s.as_dict() for s in self.standings()],
        }
        if private:
            data["entrants"] = [e.as_dict() for e in self.entrants]
            data["unassigned"] = [e.id for e in self.entrants if e.team is None]
            data["created_at"] = as_aware(self.created_at).isoformat() if self.created_at else None
        return data


class TournamentTeam(db.Model, TimestampMixin):
    """A tournament-day team; unrelated to the registration ``teams`` table."""

    __tablename__ = "tournament_teams"
    __table_args__ = (Index("ix_tournament_teams_position", "tournament_id", "position"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="teams")
    members: Mapped[List["Entrant"]] = relationship("Entrant", back_populates="team", order_by="Entrant.id")

    def as_dict(self, *, private: bool = True) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "players": [m.as_dict() if private else {"name": m.name} for m in self.members],
        }


class Entrant(db.Model, TimestampMixin):
    __tablename__ = "tournament_entrants"
    __table_args__ = (UniqueConstraint("tournament_id", "player_id", name="uq_tournament_entrants_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    team_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("tournament_teams.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    player_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("players.id", ondelete="SET NULL"),
        nullable=True,
        doc="Registered player this entrant was imported from; NULL for walk-ins",
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    age_category: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    grade_level: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    registered_team: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    walk_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="entrants")
    team: Mapped[Optional["TournamentTeam"]] = relationship("TournamentTeam", back_populates="members")

    @classmethod
    def from_domain(cls, e: rules.Entrant, **extra: Any) -> "Entrant":
        return cls(
            name=e.name.strip(),
            phone=e.phone,
            age_category=e.age_category.value if e.age_category else None,
            grade_level=e.grade_level,
            walk_in=e.walk_in,
            **extra,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "age_category": self.age_category,
            "grade_level": self.grade_level,
            "registered_team": self.registered_team,
            "walk_in": bool(self.walk_in),
            "team_id": self.team_id,
            "player_id": self.player_id,
        }


class Game(db.Model, TimestampMixin):
    __tablename__ = "tournament_games"
    __table_args__ = (UniqueConstraint("tournament_id", "number", name="uq_tournament_games_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    court: Mapped[int] = mapped_column(Integer, nullable=False)
    starts_at: Mapped[dt.time] = mapped_column(Time, nullable=False)
    team_a_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournament_teams.id", ondelete="CASCADE"), nullable=False
    )
    team_b_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournament_teams.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=rules.GameStatus.SCHEDULED.value)
    score_a: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    score_b: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(db.DateTime, nullable=True)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="games")

    def result(self) -> rules.GameResult:
        return rules.GameResult(self.team_a_id, self.team_b_id, int(self.score_a or 0), int(self.score_b or 0))

    def as_dict(self) -> Dict[str, Any]:
        completed = self.status == rules.GameStatus.COMPLETED.value
        return {
            "id": self.id,
            "number": self.number,
            "round": self.round,
            "court": self.court,
            "starts_at": self.starts_at.strftime("%H:%M"),
            "team_a_id": self.team_a_id,
            "team_b_id": self.team_b_id,
            "status": self.status,
            "score_a": self.score_a,
            "score_b": self.score_b,
            "winner_id": self.result().winner if completed else None,
            "completed_at": as_aware(self.completed_at).isoformat() if self.completed_at else None,
        }
