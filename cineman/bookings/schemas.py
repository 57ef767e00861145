from pydantic import Field
from datetime import datetime, date
from decimal import Decimal
import uuid

from cineman.models import TimeSlot, BookingStatus
from cineman.responses import CamelModel

class CreateBookingRequest(CamelModel):
    """Request to book seats in one time slot of a show time"""
    show_time_id: uuid.UUID
    total_requested_seats: int = Field(..., gt=0)
    time_slot: TimeSlot

class BookingResponse(CamelModel):
    """Booking details returned to its owner"""
    id: uuid.UUID
    booked_seats: int
    movie_id: uuid.UUID
    show_date: date
    theatre_name: str
    time_slot: TimeSlot
    status: BookingStatus
    total_amount: Decimal
    order_date: datetime
