import uuid
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from cineman.database import Base, get_db
from cineman.main import app
from cineman.models import User, Movie, ShowTime, Genre, Format, Language
from cineman.notifications import get_notifier
from cineman.auth.utils import get_password_hash, create_access_token

PASSWORD = "Ab1!defg"


class FakeNotifier:
    """Records every message instead of emailing it"""

    def __init__(self):
        self.sent = []
        self.delivered = True
        self.error = None

    def send(self, recipient, kind, payload):
        self.sent.append((recipient, kind, payload))
        if self.error is not None:
            raise self.error
        return self.delivered

    def of_kind(self, kind):
        return [message for message in self.sent if message[1] == kind]


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def make_user(db, email="moviegoer@example.com", confirmed=True):
    user = User(
        email=email,
        password=get_password_hash(PASSWORD),
        is_email_confirmed=confirmed,
        first_name="Alex",
        last_name="Doe"
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_movie(db, name="Interstellar", **overrides):
    fields = dict(
        name=name,
        description=f"{name} description",
        rating="PG-13",
        poster_url=f"https://posters.example.com/{name.lower()}.jpg",
        running_time=120,
        release_date=date(2020, 1, 1),
        genre=Genre.SCIFI,
        format=Format.IMAX,
        language=Language.ENGLISH,
    )
    fields.update(overrides)
    movie = Movie(**fields)
    db.add(movie)
    db.commit()
    db.refresh(movie)
    return movie


def make_show_time(db, movie, days_ahead=3, seats=None, price=50, theatre_name="Grand Cinema"):
    show = ShowTime(
        movie_id=movie.id,
        show_date=date.today() + timedelta(days=days_ahead),
        theatre_name=theatre_name,
        seats_per_time_slot=dict(seats or {"MORNING": 10, "AFTERNOON": 5}),
        price_per_seat=price
    )
    db.add(show)
    db.commit()
    db.refresh(show)
    return show


def bearer(user_id):
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def auth_headers(user):
    return bearer(user.id)


@pytest.fixture
def movie(db):
    return make_movie(db)


@pytest.fixture
def show_time(db, movie):
    return make_show_time(db, movie)


@pytest.fixture
def unknown_id():
    return uuid.uuid4()
