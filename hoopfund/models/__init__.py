from __future__ import annotations

from hoopfund.extensions import db

from .mixins import TimestampMixin
from .payment import Payment
from .sponsor import Sponsor
from .status_change import StatusChange
from .team import Player, Team
from .tournament import Entrant, Game, Tournament, TournamentTeam
from .volunteer import Volunteer
from .webhook_event import WebhookEvent

__all__ = [
    "db",
    "TimestampMixin",
    "Payment",
    "Player",
    "Sponsor",
    "StatusChange",
    "Team",
    "Tournament",
    "TournamentTeam",
    "Entrant",
    "Game",
    "Volunteer",
    "WebhookEvent",
]
