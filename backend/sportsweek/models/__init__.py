from sportsweek.models.enums import (
    FixtureStatus,
    ProfileRole,
    RegistrationStatus,
    RoundStatus,
    TeamStatus,
    TeamType,
    TournamentFormat,
    TournamentStatus,
)
from sportsweek.models.fixture import Fixture
from sportsweek.models.match_update import MatchUpdate
from sportsweek.models.profile import Profile
from sportsweek.models.registration import IndividualRegistration, TeamRegistration
from sportsweek.models.registration_setting import RegistrationSetting
from sportsweek.models.sport import Sport
from sportsweek.models.team import Team
from sportsweek.models.tournament import Tournament
from sportsweek.models.tournament_round import TournamentRound
from sportsweek.models.tournament_team import TournamentTeam

__all__ = [
    "Sport",
    "Team",
    "Profile",
    "Tournament",
    "TournamentTeam",
    "TournamentRound",
    "Fixture",
    "MatchUpdate",
    "RegistrationSetting",
    "TeamRegistration",
    "IndividualRegistration",
    "TournamentFormat",
    "TournamentStatus",
    "RoundStatus",
    "FixtureStatus",
    "ProfileRole",
    "TeamStatus",
    "TeamType",
    "RegistrationStatus",
]
