import enum
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, ForeignKey, Numeric, JSON, Enum, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship, composite
from sqlalchemy.sql import func
from cineman.database import Base

# ================================
# Enumerations
# ================================
class TimeSlot(str, enum.Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"

class BookingStatus(str, enum.Enum):
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"

class Genre(str, enum.Enum):
    ACTION = "ACTION"
    ADVENTURE = "ADVENTURE"
    ANIMATION = "ANIMATION"
    BIOGRAPHY = "BIOGRAPHY"
    COMEDY = "COMEDY"
    CRIME = "CRIME"
    DOCUMENTARY = "DOCUMENTARY"
    DRAMA = "DRAMA"
    FAMILY = "FAMILY"
    FANTASY = "FANTASY"
    FILMNOIR = "FILMNOIR"
    HISTORY = "HISTORY"
    HORROR = "HORROR"
    MUSIC = "MUSIC"
    MUSICAL = "MUSICAL"
    MYSTERY = "MYSTERY"
    ROMANCE = "ROMANCE"
    SCIFI = "SCIFI"
    SHORT = "SHORT"
    SPORT = "SPORT"
    SUPERHERO = "SUPERHERO"
    THRILLER = "THRILLER"
    WAR = "WAR"
    WESTERN = "WESTERN"

class Format(str, enum.Enum):
    TWO_D = "TWO_D"
    THREE_D = "THREE_D"
    IMAX = "IMAX"
    FOUR_DX = "FOUR_DX"

class Language(str, enum.Enum):
    ENGLISH = "ENGLISH"
    HINDI = "HINDI"
    TAMIL = "TAMIL"
    TELUGU = "TELUGU"
    SPANISH = "SPANISH"
    FRENCH = "FRENCH"
    JAPANESE = "JAPANESE"
    KOREAN = "KOREAN"

# ================================
# Shared value: which show a record refers to
# ================================
@dataclass(frozen=True)
class ScheduledShow:
    movie_id: uuid.UUID
    show_date: date
    theatre_name: str

# ================================
# Users
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    is_email_confirmed = Column(Boolean, default=False, nullable=False)
    temp_email = Column(String(255))
    confirmation_token = Column(String(64), index=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    date_of_birth = Column(Date)
    address = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    bookings = relationship("Booking", back_populates="user", cascade="all, delete-orphan")

# ================================
# Movies & Show Times
# ================================
class Movie(Base):
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    rating = Column(String(10), nullable=False, default="")
    poster_url = Column(String(500))
    running_time = Column(Integer, nullable=False)
    release_date = Column(Date, nullable=False)
    genre = Column(Enum(Genre), nullable=False, index=True)
    format = Column(Enum(Format), nullable=False, index=True)
    language = Column(Enum(Language), nullable=False, index=True)
    is_featured = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    show_times = relationship("ShowTime", back_populates="movie")

class ShowTime(Base):
    """Seat inventory for one movie, date and theatre, broken down by time slot"""
    __tablename__ = "show_times"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    movie_id = Column(Uuid, ForeignKey("movies.id"), nullable=False, index=True)
    show_date = Column(Date, nullable=False, index=True)
    theatre_name = Column(String(255), nullable=False)
    # {"MORNING": 10, "AFTERNOON": 5}; only offered slots are present
    seats_per_time_slot = Column(JSON, nullable=False, default=dict)
    price_per_seat = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False)

    scheduled_show = composite(ScheduledShow, movie_id, show_date, theatre_name)

    # Relationships
    movie = relationship("Movie", back_populates="show_times")

    __table_args__ = (
        UniqueConstraint("movie_id", "show_date", "theatre_name", name="uq_show_times_scheduled_show"),
    )
    __mapper_args__ = {"version_id_col": version}

    def available_seats(self, time_slot: TimeSlot) -> int:
        return self.seats_per_time_slot.get(TimeSlot(time_slot).value, 0)

    def offers(self, time_slot: TimeSlot) -> bool:
        return TimeSlot(time_slot).value in self.seats_per_time_slot

    def adjust_seats(self, time_slot: TimeSlot, delta: int) -> None:
        # Reassign rather than mutate so the JSON column is flagged dirty
        seats = dict(self.seats_per_time_slot)
        seats[TimeSlot(time_slot).value] += delta
        if seats[TimeSlot(time_slot).value] < 0:
            raise ValueError(f"Seat count for {time_slot} cannot go negative")
        self.seats_per_time_slot = seats

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    movie_id = Column(Uuid, ForeignKey("movies.id"), nullable=False)
    show_date = Column(Date, nullable=False)
    theatre_name = Column(String(255), nullable=False)
    time_slot = Column(Enum(TimeSlot), nullable=False)
    booked_seats = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.BOOKED, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False)

    scheduled_show = composite(ScheduledShow, movie_id, show_date, theatre_name)

    # Relationships
    user = relationship("User", back_populates="bookings")
