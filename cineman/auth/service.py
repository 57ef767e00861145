import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from cineman.models import User
from cineman.errors import ErrorCode, Result
from cineman.notifications import NotificationKind
from cineman.auth.schemas import (
    RegisterUserRequest, LoginRequest, AccessTokenRequest, ChangeEmailRequest,
    ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest, TokenResponse
)
from cineman.auth.utils import (
    get_password_hash, verify_password, is_valid_password, is_valid_email,
    generate_confirmation_token, create_access_token, create_refresh_token,
    verify_refresh_token
)

logger = logging.getLogger(__name__)

class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID"""
        return db.get(User, user_id)

    @staticmethod
    def get_user_by_token(db: Session, token: str) -> Optional[User]:
        """Get user holding a confirmation token"""
        return db.query(User).filter(User.confirmation_token == token).first()

class AuthService:
    """Credential lifecycle: registration, tokens, email and password changes"""

    def __init__(self, db: Session, notifier):
        self.db = db
        self.notifier = notifier

    def register(self, request: RegisterUserRequest) -> Result[None]:
        """Register a new, unconfirmed user and send the confirmation email"""
        if not request.email or not request.password:
            logger.error("Email or password is empty")
            return Result.failure(ErrorCode.EMPTY_CREDENTIALS)

        if not is_valid_email(request.email):
            logger.error("Invalid email format")
            return Result.failure(ErrorCode.EMAIL_FORMAT_INVALID)

        logger.info("Checking whether user exists in the database")
        existing = UserService.get_user_by_email(self.db, request.email)
        if existing is not None:
            if existing.is_email_confirmed:
                logger.error("User already exists")
                return Result.failure(ErrorCode.USER_ALREADY_EXISTS)
            logger.error("Email not confirmed and user exists")
            return Result.failure(ErrorCode.EMAIL_NOT_CONFIRMED_AND_USER_EXISTS)

        if not is_valid_password(request.password):
            logger.error("Password does not meet the requirements")
            return Result.failure(ErrorCode.PASSWORD_POLICY_NOT_MET)

        confirmation_token = generate_confirmation_token()
        user = User(
            email=request.email,
            password=get_password_hash(request.password),
            confirmation_token=confirmation_token,
            is_email_confirmed=False
        )

        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.error(f"User with email {request.email} was registered concurrently")
            return Result.failure(ErrorCode.USER_ALREADY_EXISTS)

        logger.info("Sending confirmation email to the user")
        self._notify(request.email, NotificationKind.EMAIL_CONFIRMATION, {"token": confirmation_token})

        logger.info(f"User {user.id} registered successfully")
        return Result.success()

    def login(self, request: LoginRequest) -> Result[TokenResponse]:
        """Verify credentials and issue a refresh token"""
        if not request.email or not request.password:
            logger.error("Email or password is empty")
            return Result.failure(ErrorCode.CREDENTIALS_INVALID)

        user = UserService.get_user_by_email(self.db, request.email)

        # Runs the hash even for unknown emails
        if not verify_password(request.password, user.password if user else None):
            logger.error("Invalid credentials")
            return Result.failure(ErrorCode.CREDENTIALS_INVALID)

        logger.info(f"Generating refresh token for user {user.id}")
        return Result.success(TokenResponse(token=create_refresh_token(str(user.id))))

    def refresh_access_token(self, request: AccessTokenRequest) -> Result[TokenResponse]:
        """Exchange a refresh token for a new access token"""
        if not request.refresh_token:
            logger.error("Refresh token is empty")
            return Result.failure(ErrorCode.INVALID_REFRESH_TOKEN)

        payload = verify_refresh_token(request.refresh_token)
        if payload is None:
            logger.error("Invalid refresh token")
            return Result.failure(ErrorCode.INVALID_REFRESH_TOKEN)

        try:
            user_id = uuid.UUID(payload["sub"])
        except ValueError:
            logger.error("Refresh token subject is not a user id")
            return Result.failure(ErrorCode.INVALID_REFRESH_TOKEN)

        user = UserService.get_user_by_id(self.db, user_id)
        if user is None:
            logger.error("User not found")
            return Result.failure(ErrorCode.INVALID_REFRESH_TOKEN)

        logger.info(f"Generating access token for user {user.id}")
        return Result.success(TokenResponse(token=create_access_token(str(user.id))))

    def confirm_email(self, token: str) -> Result[None]:
        """Confirm the primary email, or promote a staged email change"""
        if not token:
            logger.error("Token is empty")
            return Result.failure(ErrorCode.TOKEN_INVALID)

        user = UserService.get_user_by_token(self.db, token)
        if user is None:
            logger.error("User not found with the given token")
            return Result.failure(ErrorCode.TOKEN_INVALID)

        if user.temp_email:
            taken = UserService.get_user_by_email(self.db, user.temp_email)
            if taken is not None and taken.id != user.id:
                logger.error("User already exists with the staged email")
                return Result.failure(ErrorCode.USER_ALREADY_EXISTS)
            user.email = user.temp_email
            user.temp_email = None

        user.confirmation_token = None
        user.is_email_confirmed = True

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.error("Staged email was taken concurrently")
            return Result.failure(ErrorCode.USER_ALREADY_EXISTS)

        logger.info(f"Email confirmed for user {user.id}")
        return Result.success()

    def change_email(self, request: ChangeEmailRequest, user_id: uuid.UUID) -> Result[None]:
        """Stage a new email and send it a confirmation token"""
        if not request.new_email or not is_valid_email(request.new_email):
            logger.error("Invalid email format")
            return Result.failure(ErrorCode.EMAIL_FORMAT_INVALID)

        user = UserService.get_user_by_id(self.db, user_id)
        if user is None:
            logger.error(f"User {user_id} not found")
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        confirmation_token = generate_confirmation_token()
        user.temp_email = request.new_email
        user.confirmation_token = confirmation_token
        self.db.commit()

        logger.info("Sending confirmation email to the new email")
        self._notify(request.new_email, NotificationKind.EMAIL_CONFIRMATION, {"token": confirmation_token})

        return Result.success()

    def change_password(self, request: ChangePasswordRequest, user_id: uuid.UUID) -> Result[None]:
        """Replace the password after verifying the current one"""
        if not request.new_password or not request.old_password:
            logger.error("New password or old password is empty")
            return Result.failure(ErrorCode.PASSWORD_EMPTY)

        user = UserService.get_user_by_id(self.db, user_id)
        if user is None:
            logger.error(f"User {user_id} not found")
            return Result.failure(ErrorCode.USER_NOT_FOUND)

        if not verify_password(request.old_password, user.password):
            logger.error("Incorrect old password")
            return Result.failure(ErrorCode.INCORRECT_OLD_PASSWORD)

        if not is_valid_password(request.new_password):
            logger.error("New password does not meet the requirements")
            return Result.failure(ErrorCode.INCORRECT_NEW_PASSWORD)

        user.password = get_password_hash(request.new_password)
        self.db.commit()

        logger.info(f"Password changed for user {user.id}")
        return Result.success()

    def forgot_password(self, request: ForgotPasswordRequest) -> Result[None]:
        """Send a reset token; unknown emails succeed silently"""
        if not request.email or not is_valid_email(request.email):
            logger.error("Invalid email format")
            return Result.failure(ErrorCode.EMAIL_FORMAT_INVALID)

        user = UserService.get_user_by_email(self.db, request.email)
        if user is None:
            logger.info("User not found")
            return Result.success()

        if not user.is_email_confirmed:
            logger.error("Email not confirmed")
            return Result.failure(ErrorCode.EMAIL_NOT_CONFIRMED)

        # A reset token never promotes a staged email change
        confirmation_token = generate_confirmation_token()
        user.confirmation_token = confirmation_token
        user.temp_email = None
        self.db.commit()

        logger.info("Sending password reset email")
        self._notify(request.email, NotificationKind.PASSWORD_RESET, {"token": confirmation_token})

        return Result.success()

    def reset_password(self, request: ResetPasswordRequest) -> Result[None]:
        """Set a new password using a token from forgot_password"""
        if not request.token:
            logger.error("Token is empty")
            return Result.failure(ErrorCode.TOKEN_INVALID)

        if not request.new_password:
            logger.error("New password is empty")
            return Result.failure(ErrorCode.PASSWORD_EMPTY)
        if not is_valid_password(request.new_password):
            logger.error("New password does not meet the requirements")
            return Result.failure(ErrorCode.PASSWORD_POLICY_NOT_MET)

        if not request.email or not is_valid_email(request.email):
            logger.error("Invalid email format")
            return Result.failure(ErrorCode.EMAIL_FORMAT_INVALID)

        user = UserService.get_user_by_email(self.db, request.email)
        if user is None:
            logger.error("User not found")
            return Result.failure(ErrorCode.USER_NOT_FOUND)
        if user.confirmation_token != request.token and not user.is_email_confirmed:
            logger.error("Email not confirmed and password reset token is invalid")
            return Result.failure(ErrorCode.EMAIL_NOT_CONFIRMED_AND_PASSWORD_RESET)
        if user.confirmation_token != request.token:
            logger.error("Password reset token is invalid")
            return Result.failure(ErrorCode.TOKEN_INVALID)

        user.password = get_password_hash(request.new_password)
        user.confirmation_token = None
        self.db.commit()

        logger.info("Sending password changed successfully email")
        self._notify(request.email, NotificationKind.PASSWORD_CHANGED, {})

        return Result.success()

    def _notify(self, recipient: str, kind: NotificationKind, payload: dict) -> None:
        try:
            delivered = self.notifier.send(recipient, kind, payload)
        except Exception:
            logger.exception(f"Notifier raised while sending {kind.value} email to {recipient}")
            return

        if not delivered:
            logger.error(f"Could not deliver {kind.value} email to {recipient}")
