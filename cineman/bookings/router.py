import uuid

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from cineman.database import get_db
from cineman.auth.dependencies import get_current_user_id
from cineman.notifications import get_notifier
from cineman.bookings.schemas import CreateBookingRequest, BookingResponse
from cineman.bookings.service import BookingService
from cineman.responses import success_response, failure_response, no_content

router = APIRouter()

def get_booking_service(db: Session = Depends(get_db), notifier=Depends(get_notifier)) -> BookingService:
    return BookingService(db, notifier)

@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
    body: CreateBookingRequest,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Create a new booking for the current user"""
    result = booking_service.create_booking(body, user_id)
    if result.is_failure:
        return failure_response(request, result.error)

    response = success_response(request, str(result.value), status_code=status.HTTP_201_CREATED)
    response.headers["Location"] = str(request.url_for("get_booking", booking_id=result.value))
    return response

@router.get("")
def get_bookings(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Get all bookings of the current user"""
    bookings = booking_service.list_bookings(user_id)
    return success_response(request, [BookingResponse.model_validate(b) for b in bookings])

@router.get("/{booking_id}")
def get_booking(
    booking_id: uuid.UUID,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Get booking details by ID"""
    result = booking_service.get_booking(booking_id, user_id)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request, BookingResponse.model_validate(result.value))

@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_booking(
    booking_id: uuid.UUID,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Cancel a booking and release its seats"""
    result = booking_service.cancel_booking(booking_id, user_id)
    if result.is_failure:
        return failure_response(request, result.error)
    return no_content()
