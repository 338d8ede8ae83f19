"""
Shared fixtures: an in-memory database per test plus a small hostel with
one double room (beds A and B) and a few users.
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from hostel_occupancy.core.logging import setup_logging
from hostel_occupancy.db.session import create_db_engine, init_db
from hostel_occupancy.models.base.enums import RoomType, UserRole
from hostel_occupancy.models.hostel import Hostel
from hostel_occupancy.models.user import User
from hostel_occupancy.schemas.booking import BookingCreate, EmergencyContact
from hostel_occupancy.schemas.room import BedCreate, RoomCreate
from hostel_occupancy.services.booking import BookingService
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.inventory import RoomService
from hostel_occupancy.utils.datetime_utils import utc_now


@pytest.fixture(autouse=True)
def app_logging():
    """Every test runs under the application's logging setup (INFO, JSON)."""
    setup_logging()


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables."""
    engine = create_db_engine("sqlite+pysqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


def _add_user(db, name, email, role, phone=None):
    user = User(name=name, email=email, phone=phone, role=role)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def owner(db):
    return _add_user(db, "Olive Owner", "owner@example.com", UserRole.OWNER, "9000000001")


@pytest.fixture
def other_owner(db):
    return _add_user(db, "Oscar Owner", "oscar@example.com", UserRole.OWNER, "9000000009")


@pytest.fixture
def staff_user(db):
    return _add_user(db, "Stan Staff", "stan.com", UserRole.STAFF, "9000000005")


@pytest.fixture
def admin(db):
    return _add_user(db, "Ada Admin", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def student_user(db):
    return _add_user(db, "Sam Student", "sam@example.com", UserRole.STUDENT, "9000000002")


@pytest.fixture
def other_student(db):
    return _add_user(db, "Tia Student", "tia@example.com", UserRole.STUDENT, "9000000003")


def as_principal(user):
    return Principal(user_id=user.id, role=UserRole(user.role))


@pytest.fixture
def owner_principal(owner):
    return as_principal(owner)


@pytest.fixture
def admin_principal(admin):
    return as_principal(admin)


@pytest.fixture
def staff_principal(staff_user):
    return as_principal(staff_user)


@pytest.fixture
def other_owner_principal(other_owner):
    return as_principal(other_owner)


@pytest.fixture
def student_principal(student_user):
    return as_principal(student_user)


@pytest.fixture
def other_student_principal(other_student):
    return as_principal(other_student)


@pytest.fixture
def hostel(db, owner):
    hostel = Hostel(owner_id=owner.id, name="Green Leaf Hostel", address_line1="12 College Road", city="Pune")
    db.add(hostel)
    db.commit()
    return hostel


@pytest.fixture
def room(db, hostel, owner_principal):
    """Double room 101 at 3000/month with beds A and B."""
    result = RoomService(db).create_room(
        owner_principal,
        hostel.id,
        RoomCreate(
            room_number="101",
            room_type=RoomType.DOUBLE,
            capacity=2,
            base_rent=Decimal("3000"),
            beds=[BedCreate(bed_number="A"), BedCreate(bed_number="B")],
        ),
    )
    assert result.is_success, result.error
    return result.data


@pytest.fixture
def booking_service(db):
    return BookingService(db)


def booking_request(hostel, room, bed_number="A", months=6, **overrides):
    fields = dict(
        hostel_id=hostel.id,
        room_id=room.id,
        bed_number=bed_number,
        check_in_date=utc_now().replace(microsecond=0) + timedelta(days=7),
        duration_months=months,
        emergency_contact=EmergencyContact(name="Rita Parent", relationship="mother", phone="9000000004"),
    )
    fields.update(overrides)
    return BookingCreate(**fields)


@pytest.fixture
def make_booking(booking_service, hostel, room, student_principal):
    """Create a booking (pending by default) and return it."""

    def _make(principal=None, bed_number="A", months=6, **overrides):
        result = booking_service.create_booking(
            principal or student_principal,
            booking_request(hostel, room, bed_number, months, **overrides),
        )
        assert result.is_success, result.error
        return result.data

    return _make


@pytest.fixture
def confirmed_booking(booking_service, make_booking, owner_principal):
    booking = make_booking()
    result = booking_service.confirm_booking(owner_principal, booking.id)
    assert result.is_success, result.error
    return result.data


@pytest.fixture
def checked_in_booking(booking_service, confirmed_booking, owner_principal):
    result = booking_service.check_in(owner_principal, confirmed_booking.id)
    assert result.is_success, result.error
    return result.data["booking"]


@pytest.fixture
def booking_payload(hostel, room):
    """Build a BookingCreate for the fixture room without submitting it."""

    def _payload(bed_number="A", months=6, **overrides):
        return booking_request(hostel, room, bed_number, months, **overrides)

    return _payload
