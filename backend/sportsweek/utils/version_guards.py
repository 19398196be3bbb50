"""
Fixture Version Guards

Optimistic concurrency for fixture writes:
- Callers may send the version they last read (expected_version)
- A write only lands if the stored version still matches (compare-and-swap)
- Every successful write bumps the version by one
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlmodel import Session

from sportsweek.models.fixture import Fixture
from sportsweek.services.errors import ConflictError, NotFoundError

VERSION_MISMATCH = "VERSION_MISMATCH"


def get_fixture_or_404(session: Session, fixture_id: int, tournament_id: Optional[int] = None) -> Fixture:
    """
    Get a fixture or raise NotFoundError.

    Args:
        session: Database session
        fixture_id: Fixture ID
        tournament_id: Optional tournament ID the fixture must belong to

    Raises:
        NotFoundError: Fixture missing or in another tournament
    """
    fixture = session.get(Fixture, fixture_id)
    if not fixture:
        raise NotFoundError("Fixture not found", code="FIXTURE_NOT_FOUND")
    if tournament_id is not None and fixture.tournament_id != tournament_id:
        raise NotFoundError(
            f"Fixture {fixture_id} does not belong to tournament {tournament_id}", code="FIXTURE_NOT_FOUND"
        )
    return fixture


def require_fixture_version(fixture: Fixture, expected_version: Optional[int]) -> None:
    """
    Raise ConflictError if the caller read a stale version.

    expected_version=None skips the check (last write wins).
    """
    if expected_version is not None and fixture.version != expected_version:
        raise ConflictError(
            "This fixture was updated by another user. Please refresh and try again.",
            code=VERSION_MISMATCH,
            context={"expected_version": expected_version, "current_version": fixture.version},
        )


def compare_and_swap_fixture(session: Session, fixture: Fixture, values: Dict[str, Any]) -> Fixture:
    """
    Write values to the fixture only if its version is unchanged since it was read.

    Issues UPDATE ... WHERE id = :id AND version = :read_version, so a concurrent
    writer that committed in between makes this a no-op and raises ConflictError.
    Does not commit; the caller owns the transaction.

    Returns:
        The refreshed fixture with the bumped version
    """
    read_version = fixture.version
    payload = dict(values)
    payload["version"] = read_version + 1
    payload.setdefault("updated_at", datetime.utcnow())

    result = session.execute(
        update(Fixture)
        .where(Fixture.id == fixture.id, Fixture.version == read_version)
        .values(**payload)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        session.rollback()
        raise ConflictError(
            "This fixture was updated by another user. Please refresh and try again.",
            code=VERSION_MISMATCH,
            context={"expected_version": read_version},
        )

    session.flush()
    session.refresh(fixture)
    return fixture
