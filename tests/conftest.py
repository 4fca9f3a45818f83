# tests/conftest.py

from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy_utils import create_database, database_exists, drop_database
from starlette.testclient import TestClient

from academy_reservations.api import deps
from academy_reservations.core.limiter import limiter
from academy_reservations.db.base_class import Base
from academy_reservations.main import app
from academy_reservations.models import GymClass, Reservation, Student  # noqa: F401
from academy_reservations.services.reservations import FrozenClock, ReservationService
from tests.utils.constants import CONFIRMATION_WINDOW_MINUTES, NOW


# --- Test Database Setup ---
TEST_DATABASE_URL = "sqlite:///./academy_reservations_test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    if database_exists(engine.url):
        drop_database(engine.url)
    create_database(engine.url)
    yield
    engine.dispose()
    drop_database(engine.url)


@pytest.fixture(scope="function")
def db():
    """
    Fresh schema per test. The service commits for real, so an outer
    rollback would not isolate tests; the tables are dropped instead.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def clock():
    return FrozenClock(NOW)


@pytest.fixture(scope="function")
def service(clock):
    return ReservationService(clock=clock, confirmation_window_minutes=CONFIRMATION_WINDOW_MINUTES)


# --- Test Client Fixture ---
@pytest.fixture(scope="function")
def client(db, service):
    """
    TestClient backed by the test database and the frozen-clock service.
    Authentication goes through the real JWT dependency (see tests/utils/auth.py).
    """

    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_reservation_service] = lambda: service
    limiter.reset()

    with patch("academy_reservations.scheduler.init_scheduler"), \
            patch("academy_reservations.scheduler.shutdown_scheduler"):
        with TestClient(app) as test_client:
            yield test_client

    app.dependency_overrides.clear()
