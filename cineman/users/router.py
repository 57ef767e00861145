import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from cineman.database import get_db
from cineman.auth.dependencies import get_current_user_id
from cineman.users.schemas import UpdateProfileRequest
from cineman.users.service import ProfileService
from cineman.responses import success_response, failure_response

router = APIRouter()

@router.get("/me")
def get_profile(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get current user profile"""
    result = ProfileService.get_profile(db, user_id)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request, result.value)

@router.put("/me")
def update_profile(
    body: UpdateProfileRequest,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update current user profile"""
    result = ProfileService.update_profile(db, user_id, body)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request)

@router.delete("/me")
def delete_user(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete current user"""
    result = ProfileService.delete_user(db, user_id)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request)
