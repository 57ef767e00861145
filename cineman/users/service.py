import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from cineman.config import settings
from cineman.errors import ErrorCode, Result
from cineman.models import Booking, BookingStatus, ShowTime, User
from cineman.users.schemas import UserProfile, UpdateProfileRequest

logger = logging.getLogger(__name__)

MINIMUM_AGE_YEARS = 13

def age_on(date_of_birth: date, today: date) -> int:
    """Whole years between a birth date and today"""
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)

class ProfileService:
    @staticmethod
    def get_profile(db: Session, user_id: uuid.UUID) -> Result[UserProfile]:
        """Get the profile of a user"""
        user = db.get(User, user_id)
        if user is None:
            logger.error(f"User {user_id} not found")
            return Result.failure(ErrorCode.USER_NOT_FOUND)
        return Result.success(UserProfile.model_validate(user))

    @staticmethod
    def update_profile(db: Session, user_id: uuid.UUID, changes: UpdateProfileRequest) -> Result[None]:
        """Update the supplied profile fields"""
        user = db.get(User, user_id)
        if user is None:
            logger.error(f"User {user_id} not found")
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        if changes.date_of_birth is not None:
            today = date.today()
            if changes.date_of_birth > today:
                logger.error(f"Date of birth {changes.date_of_birth} is in the future")
                return Result.failure(ErrorCode.INVALID_DATE)
            if age_on(changes.date_of_birth, today) < MINIMUM_AGE_YEARS:
                logger.error(f"User {user_id} would be younger than {MINIMUM_AGE_YEARS}")
                return Result.failure(ErrorCode.AGE_TOO_SMALL)
            user.date_of_birth = changes.date_of_birth

        if changes.first_name is not None:
            user.first_name = changes.first_name
        if changes.last_name is not None:
            user.last_name = changes.last_name
        if changes.address is not None:
            user.address = changes.address.model_dump()

        db.commit()
        logger.info(f"User profile with ID {user_id} has been updated")
        return Result.success()

    @staticmethod
    def delete_user(db: Session, user_id: uuid.UUID, max_retries: Optional[int] = None) -> Result[None]:
        """Delete a user and their bookings, returning seats of upcoming shows"""
        retries = settings.BOOKING_MAX_RETRIES if max_retries is None else max_retries

        for attempt in range(1, retries + 1):
            try:
                return ProfileService._delete_user(db, user_id)
            except StaleDataError:
                db.rollback()
                logger.warning(f"Show times of user {user_id} changed concurrently, retrying ({attempt}/{retries})")

        logger.error(f"Gave up deleting user {user_id} after {retries} conflicts")
        return Result.failure(ErrorCode.CONCURRENT_UPDATE)

    @staticmethod
    def _delete_user(db: Session, user_id: uuid.UUID) -> Result[None]:
        user = db.get(User, user_id)
        if user is None:
            logger.error(f"User {user_id} not found")
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        active = db.query(Booking).filter(
            Booking.user_id == user_id,
            Booking.status == BookingStatus.BOOKED,
            Booking.show_date >= date.today()
        ).with_for_update().all()

        # One locked row per show, several bookings may share it
        shows = {}
        for booking in active:
            key = booking.scheduled_show
            if key not in shows:
                shows[key] = db.query(ShowTime).filter(
                    ShowTime.scheduled_show == key
                ).with_for_update().first()
            show = shows[key]
            if show is None or not show.offers(booking.time_slot):
                logger.warning(f"No inventory left to return the seats of booking {booking.id}")
                continue
            show.adjust_seats(booking.time_slot, booking.booked_seats)
            logger.info(f"Returned {booking.booked_seats} {booking.time_slot.value} seats of booking {booking.id}")

        db.delete(user)
        db.commit()
        logger.info(f"User with ID {user_id} has been deleted")
        return Result.success()
