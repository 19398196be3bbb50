"""
Bracket planner: pure single-elimination planning.

Given a team count and a tournament format, computes the ordered rounds
(number, label, match count), maps seeds into first-round slots, and
resolves where the winner of a bracket slot plays next.

No I/O. Persisting rounds and fixtures is the caller's job
(see bracket_service and advancement_service).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from sportsweek.models.enums import TournamentFormat

T = TypeVar("T")

SIDE_A = "team_a"
SIDE_B = "team_b"

# Labels keyed by the number of teams still in contention when the round starts
ROUND_LABELS = {
    2: "Final",
    4: "Semi-finals",
    8: "Quarter-finals",
    16: "Round of 16",
}


class PlannerError(ValueError):
    """Base error for invalid planner input."""


class InvalidTeamCountError(PlannerError):
    pass


class InvalidFormatError(PlannerError):
    pass


@dataclass(frozen=True)
class RoundPlan:
    round_number: int
    label: str
    match_count: int


@dataclass(frozen=True)
class BracketSlot:
    round_number: int
    bracket_position: int
    side: str  # SIDE_A | SIDE_B


def _ceil_half(n: int) -> int:
    return (n + 1) // 2


def parse_format(value: Union[str, TournamentFormat]) -> TournamentFormat:
    if isinstance(value, TournamentFormat):
        return value
    try:
        return TournamentFormat(value)
    except ValueError:
        raise InvalidFormatError(f"Unknown tournament format: {value!r}") from None


def round_label(remaining: int, round_number: int) -> str:
    return ROUND_LABELS.get(remaining, f"Round {round_number}")


def plan_rounds(team_count: int, tournament_format: Union[str, TournamentFormat]) -> List[RoundPlan]:
    """
    Plan the rounds of a tournament.

    Single elimination halves the field (rounding up) each round until one
    team remains, so the last round always has exactly one match.

    Round robin and double elimination are accepted formats but are not
    planned here; they yield an empty list.

    Raises:
        InvalidTeamCountError: team_count is not an integer >= 2
        InvalidFormatError: unknown format
    """
    if isinstance(team_count, bool) or not isinstance(team_count, int) or team_count < 2:
        raise InvalidTeamCountError(f"At least 2 teams are required, got {team_count!r}")

    fmt = parse_format(tournament_format)
    if fmt != TournamentFormat.single_elimination:
        return []

    rounds: List[RoundPlan] = []
    remaining = team_count
    round_number = 1
    while remaining > 1:
        matches = _ceil_half(remaining)
        rounds.append(RoundPlan(round_number, round_label(remaining, round_number), matches))
        remaining = matches
        round_number += 1
    return rounds


def assign_seeds_to_first_round(seeds: Sequence[T]) -> Dict[int, Tuple[T, Optional[T]]]:
    """
    Pair seeds into first-round bracket positions in insertion order:
    position 1 = seeds[0] vs seeds[1], position 2 = seeds[2] vs seeds[3], ...

    With an odd count the last position holds a single team and None (a bye).
    """
    if len(seeds) < 2:
        raise InvalidTeamCountError(f"At least 2 teams are required, got {len(seeds)}")

    slots: Dict[int, Tuple[T, Optional[T]]] = {}
    for index in range(0, len(seeds), 2):
        team_a = seeds[index]
        team_b = seeds[index + 1] if index + 1 < len(seeds) else None
        slots[index // 2 + 1] = (team_a, team_b)
    return slots


def next_bracket_slot(round_number: int, bracket_position: int) -> BracketSlot:
    """Winner of position p in round r plays position ceil(p/2) of round r+1,
    on side A when p is odd and side B when p is even."""
    if round_number < 1 or bracket_position < 1:
        raise PlannerError(
            f"round_number and bracket_position must be >= 1, got {round_number}, {bracket_position}"
        )
    side = SIDE_A if bracket_position % 2 == 1 else SIDE_B
    return BracketSlot(round_number + 1, _ceil_half(bracket_position), side)


def feeder_positions(bracket_position: int) -> Tuple[int, int]:
    """The two previous-round positions whose winners meet at bracket_position."""
    return 2 * bracket_position - 1, 2 * bracket_position


def decide_winner(team_a_score: Optional[int], team_b_score: Optional[int]) -> Optional[str]:
    """Side with the higher score, or None for a draw / missing score."""
    if team_a_score is None or team_b_score is None:
        return None
    if team_a_score > team_b_score:
        return SIDE_A
    if team_b_score > team_a_score:
        return SIDE_B
    return None
