from enum import Enum


class TournamentFormat(str, Enum):
    single_elimination = "single_elimination"
    double_elimination = "double_elimination"
    round_robin = "round_robin"


class TournamentStatus(str, Enum):
    draft = "draft"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class RoundStatus(str, Enum):
    pending = "pending"
    active = "active"
    completed = "completed"


class FixtureStatus(str, Enum):
    scheduled = "scheduled"
    live = "live"
    completed = "completed"
    cancelled = "cancelled"


class ProfileRole(str, Enum):
    admin = "admin"
    moderator = "moderator"
    viewer = "viewer"


class TeamStatus(str, Enum):
    active = "active"
    pending_approval = "pending_approval"
    rejected = "rejected"


class TeamType(str, Enum):
    admin_created = "admin_created"
    student_registered = "student_registered"


class RegistrationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    withdrawn = "withdrawn"
