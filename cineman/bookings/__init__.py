"""
Booking Module

Seat booking against show time inventory for the CineMan API:

- Creating a booking: availability checks, seat decrement and booking
  record written in one transaction
- Cancelling a booking: seats returned to the originating show time
- Listing and looking up a user's bookings

Key Components:
- service.py: BookingService, the seat inventory and booking lifecycle
- router.py: FastAPI endpoints under /bookings
- schemas.py: Pydantic request/response models
"""

from .router import router
from .service import BookingService
from .schemas import CreateBookingRequest, BookingResponse

__all__ = [
    "router",
    "BookingService",
    "CreateBookingRequest",
    "BookingResponse"
]
