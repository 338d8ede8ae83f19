"""
Atomic units, savepoints and version-conflict retries.
"""

import pytest
from sqlalchemy import text

from hostel_occupancy.core.exceptions import ConcurrencyConflictError, ConflictError
from hostel_occupancy.models.base.enums import BedStatus, UserRole
from hostel_occupancy.models.room import Room
from hostel_occupancy.models.user import User
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.services.base import TransactionManager
from hostel_occupancy.services.inventory import bed_operations


@pytest.fixture
def tm(db):
    return TransactionManager(db)


def emails(db):
    return sorted(email for (email,) in db.query(User.email))


def new_user(email):
    return User(name=email.split("@")[0], email=email, role=UserRole.STUDENT)


class TestUnits:
    def test_clean_exit_commits(self, db, tm):
        with tm.start() as ctx:
            db.add(new_user("kept@example.com"))

        assert ctx.committed is True
        assert ctx.duration_ms is not None
        assert emails(db) == ["kept@example.com"]

    def test_error_rolls_back_flushed_work(self, db, tm):
        """Everything flushed inside a failed unit disappears."""
        with pytest.raises(RuntimeError):
            with tm.start() as ctx:
                db.add(new_user("lost@example.com"))
                db.flush()
                raise RuntimeError("boom")

        assert ctx.rolled_back is True
        assert emails(db) == []

    def test_savepoint_keeps_enclosing_work(self, db, tm):
        """A failed savepoint undoes only its own block."""
        with tm.start() as ctx:
            db.add(new_user("kept@example.com"))
            db.flush()
            with pytest.raises(RuntimeError):
                with tm.savepoint("optional_step"):
                    db.add(new_user("dropped@example.com"))
                    db.flush()
                    raise RuntimeError("step failed")

        assert ctx.savepoints == ["optional_step"]
        assert emails(db) == ["kept@example.com"]


class TestRetries:
    def test_version_conflict_is_retried(self, db, tm, room):
        """A unit that loses the version race runs again on fresh state."""
        repository = RoomRepository(db)
        calls = []

        def unit():
            calls.append(1)
            current = repository.get_for_update(room.id)
            if len(calls) == 1:
                # Another writer bumps the row between our read and write
                db.execute(text("UPDATE rooms SET version = version + 1 WHERE id = :id"), {"id": room.id})
            bed_operations.set_maintenance(current, "A")
            return repository.save(current)

        saved = tm.run(unit, attempts=3)

        assert len(calls) == 2
        assert saved.get_bed("A").status == BedStatus.MAINTENANCE
        assert db.get(Room, room.id).version == 2

    def test_conflict_surfaces_when_attempts_run_out(self, db, tm, room):
        repository = RoomRepository(db)

        def unit():
            current = repository.get_for_update(room.id)
            db.execute(text("UPDATE rooms SET version = version + 1 WHERE id = :id"), {"id": room.id})
            bed_operations.set_maintenance(current, "A")
            return repository.save(current)

        with pytest.raises(ConcurrencyConflictError):
            tm.run(unit, attempts=1)

        reloaded = repository.get_for_update(room.id)
        assert reloaded.version == 1
        assert reloaded.get_bed("A").status == BedStatus.AVAILABLE
        db.rollback()

    def test_other_errors_are_not_retried(self, tm):
        calls = []

        def unit():
            calls.append(1)
            raise ConflictError("duplicate")

        with pytest.raises(ConflictError):
            tm.run(unit, attempts=3)

        assert len(calls) == 1
