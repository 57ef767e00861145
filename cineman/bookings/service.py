import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from cineman.config import settings
from cineman.errors import ErrorCode, Result
from cineman.models import Booking, BookingStatus, ShowTime, User
from cineman.notifications import NotificationKind
from cineman.bookings.schemas import CreateBookingRequest, BookingResponse

logger = logging.getLogger(__name__)

class BookingService:
    """
    Books and cancels seats against show time inventory.

    Every create/cancel reads the show time row with FOR UPDATE and writes it
    back under a version check, so two requests racing for the same slot are
    serialised: the loser gets StaleDataError, rolls back and starts over
    from a fresh read. Notifications go out after commit and never undo it.
    """

    def __init__(self, db: Session, notifier, max_retries: Optional[int] = None):
        self.db = db
        self.notifier = notifier
        self.max_retries = settings.BOOKING_MAX_RETRIES if max_retries is None else max_retries

    def create_booking(self, request: CreateBookingRequest, user_id: uuid.UUID) -> Result[uuid.UUID]:
        """Reserve seats in one time slot and record the booking"""
        logger.info(
            f"Booking {request.total_requested_seats} seats in {request.time_slot.value} "
            f"of show time {request.show_time_id} for user {user_id}"
        )

        for attempt in range(1, self.max_retries + 1):
            try:
                result = self._reserve_seats(request, user_id)
            except StaleDataError:
                self.db.rollback()
                logger.warning(
                    f"Show time {request.show_time_id} changed concurrently, "
                    f"retrying ({attempt}/{self.max_retries})"
                )
                continue

            if result.is_failure:
                return result

            booking = result.value
            logger.info(f"Booking {booking.id} created for show time {request.show_time_id} and user {user_id}")
            self._notify(booking, NotificationKind.BOOKING_CONFIRMATION)
            return Result.success(booking.id)

        logger.error(f"Gave up booking show time {request.show_time_id} after {self.max_retries} conflicts")
        return Result.failure(ErrorCode.CONCURRENT_UPDATE)

    def cancel_booking(self, booking_id: uuid.UUID, user_id: uuid.UUID) -> Result[None]:
        """Cancel a booking and return its seats to the show time"""
        logger.info(f"Cancelling booking {booking_id} for user {user_id}")

        for attempt in range(1, self.max_retries + 1):
            try:
                result = self._release_seats(booking_id, user_id)
            except StaleDataError:
                self.db.rollback()
                logger.warning(
                    f"Show time for booking {booking_id} changed concurrently, "
                    f"retrying ({attempt}/{self.max_retries})"
                )
                continue

            if result.is_failure:
                return result

            logger.info(f"Booking {booking_id} for user {user_id} has been cancelled")
            self._notify(result.value, NotificationKind.BOOKING_CANCELLATION)
            return Result.success()

        logger.error(f"Gave up cancelling booking {booking_id} after {self.max_retries} conflicts")
        return Result.failure(ErrorCode.CONCURRENT_UPDATE)

    def get_booking(self, booking_id: uuid.UUID, user_id: uuid.UUID) -> Result[Booking]:
        """Get one of the user's bookings"""
        booking = self._find_booking(booking_id, user_id)
        if booking is None:
            logger.error(f"Booking not found for Id: {booking_id} and UserId: {user_id}")
            return Result.failure(ErrorCode.BOOKING_NOT_FOUND)
        return Result.success(booking)

    def list_bookings(self, user_id: uuid.UUID) -> List[Booking]:
        """Get all bookings of a user, newest first"""
        bookings = self.db.query(Booking).filter(
            Booking.user_id == user_id
        ).order_by(Booking.order_date.desc()).all()

        if not bookings:
            logger.warning(f"No bookings found for UserId: {user_id}")
        return bookings

    def _reserve_seats(self, request: CreateBookingRequest, user_id: uuid.UUID) -> Result[Booking]:
        show = self.db.get(ShowTime, request.show_time_id, with_for_update=True, populate_existing=True)
        if show is None:
            return self._abort(ErrorCode.SHOW_NOT_AVAILABLE, f"Show not available for ShowTimeId: {request.show_time_id}")

        if not show.offers(request.time_slot):
            return self._abort(
                ErrorCode.TIME_SLOT_NOT_AVAILABLE,
                f"Time slot {request.time_slot.value} not offered by ShowTimeId: {request.show_time_id}"
            )

        if show.available_seats(request.time_slot) < request.total_requested_seats:
            return self._abort(
                ErrorCode.SEATS_NOT_AVAILABLE,
                f"Only {show.available_seats(request.time_slot)} seats left in {request.time_slot.value} "
                f"for ShowTimeId: {request.show_time_id}, requested {request.total_requested_seats}"
            )

        if show.show_date <= date.today():
            return self._abort(ErrorCode.SHOW_DATE_IN_PAST, f"Show date {show.show_date} is in the past for ShowTimeId: {show.id}")

        show.adjust_seats(request.time_slot, -request.total_requested_seats)
        booking = Booking(
            id=uuid.uuid4(),
            user_id=user_id,
            scheduled_show=show.scheduled_show,
            time_slot=request.time_slot,
            booked_seats=request.total_requested_seats,
            total_amount=Decimal(request.total_requested_seats * show.price_per_seat),
            status=BookingStatus.BOOKED,
            order_date=datetime.now(timezone.utc)
        )
        self.db.add(booking)
        self.db.commit()
        return Result.success(booking)

    def _release_seats(self, booking_id: uuid.UUID, user_id: uuid.UUID) -> Result[Booking]:
        booking = self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.user_id == user_id
        ).with_for_update().populate_existing().first()
        if booking is None:
            return self._abort(ErrorCode.BOOKING_NOT_FOUND, f"Booking not found for Id: {booking_id} and UserId: {user_id}")

        if booking.show_date < date.today():
            return self._abort(ErrorCode.CANCELLING_PAST_TICKETS, f"Cannot cancel past tickets for Booking Id: {booking_id}")

        if booking.status == BookingStatus.CANCELLED:
            return self._abort(ErrorCode.SHOW_ALREADY_CANCELLED, f"Booking with Id: {booking_id} is already cancelled")

        show = self.db.query(ShowTime).filter(
            ShowTime.scheduled_show == booking.scheduled_show
        ).with_for_update().populate_existing().first()
        if show is None:
            return self._abort(
                ErrorCode.SHOW_NOT_AVAILABLE,
                f"No show time matches booking {booking_id} ({booking.movie_id} on {booking.show_date} at {booking.theatre_name})"
            )
        if not show.offers(booking.time_slot):
            return self._abort(
                ErrorCode.TIME_SLOT_NOT_AVAILABLE,
                f"Show time {show.id} no longer offers {booking.time_slot.value} for booking {booking_id}"
            )

        booking.status = BookingStatus.CANCELLED
        show.adjust_seats(booking.time_slot, booking.booked_seats)
        self.db.commit()
        return Result.success(booking)

    def _find_booking(self, booking_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Booking]:
        return self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.user_id == user_id
        ).first()

    def _abort(self, code: ErrorCode, message: str) -> Result:
        # Ends the transaction so row locks are released
        self.db.rollback()
        logger.error(message)
        return Result.failure(code)

    def _notify(self, booking: Booking, kind: NotificationKind) -> None:
        user = self.db.get(User, booking.user_id)
        if user is None:
            logger.error(f"Cannot send {kind.value} for booking {booking.id}: user {booking.user_id} not found")
            return

        payload = BookingResponse.model_validate(booking).model_dump(mode="json")
        try:
            delivered = self.notifier.send(user.email, kind, payload)
        except Exception:
            logger.exception(f"Notifier raised while sending {kind.value} for booking {booking.id}")
            return

        if not delivered:
            logger.error(f"Could not deliver {kind.value} for booking {booking.id} to user {booking.user_id}")
