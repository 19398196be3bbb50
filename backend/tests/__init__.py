# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from sportsweek.models import (  # noqa: F401
    Fixture,
    IndividualRegistration,
    MatchUpdate,
    Profile,
    RegistrationSetting,
    Sport,
    Team,
    TeamRegistration,
    Tournament,
    TournamentRound,
    TournamentTeam,
)
