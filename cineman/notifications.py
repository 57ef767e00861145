"""
Transactional email for account and booking events.

The services only depend on ``send(recipient, kind, payload) -> bool``;
delivery is handed to SendGrid. A False return means the message was not
accepted and has already been logged.
"""

import logging
from enum import Enum
from typing import Any, Dict, Tuple

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from cineman.config import settings

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    BOOKING_CONFIRMATION = "booking_confirmation"
    BOOKING_CANCELLATION = "booking_cancellation"
    EMAIL_CONFIRMATION = "email_confirmation"
    PASSWORD_RESET = "password_reset"
    PASSWORD_CHANGED = "password_changed"


def render(kind: NotificationKind, payload: Dict[str, Any]) -> Tuple[str, str]:
    """Return (subject, body) for a notification"""
    if kind == NotificationKind.BOOKING_CONFIRMATION:
        return (
            "CineMan - Booking Confirmation",
            f"You have successfully booked {payload['booked_seats']} tickets for the movie "
            f"'{payload['movie_id']}' on {payload['show_date']} ({payload['time_slot']}) "
            f"at {payload['theatre_name']}.\n\nThank you for choosing CineMan!",
        )
    if kind == NotificationKind.BOOKING_CANCELLATION:
        return (
            "CineMan - Booking Cancelled",
            f"You have successfully cancelled your bookings for '{payload['movie_id']}' "
            f"on {payload['show_date']}.\n\nSorry to see you go!",
        )
    if kind == NotificationKind.EMAIL_CONFIRMATION:
        return (
            "CineMan - Email Confirmation",
            "Please confirm your email by clicking on the following link: "
            f"{settings.EMAIL_CONFIRMATION_URI}{payload['token']}",
        )
    if kind == NotificationKind.PASSWORD_RESET:
        return (
            "CineMan - Password Reset Request",
            f"Here is your forgot password link: {settings.PASSWORD_RESET_URI}{payload['token']}",
        )
    if kind == NotificationKind.PASSWORD_CHANGED:
        return (
            "CineMan - Password Reset Successfully",
            "This is to inform you that your password has been successfully changed. "
            "If this wasn't you please contact support ASAP.",
        )
    raise ValueError(f"Unknown notification kind: {kind}")


class EmailService:
    """Sends notifications through SendGrid"""

    def __init__(self, api_key=None, sender=None, sender_name=None):
        self.api_key = api_key if api_key is not None else settings.SENDGRID_API_KEY
        self.sender = sender or settings.EMAIL_SENDER
        self.sender_name = sender_name or settings.EMAIL_SENDER_NAME

    def send(self, recipient: str, kind: NotificationKind, payload: Dict[str, Any]) -> bool:
        subject, body = render(kind, payload)

        if not self.api_key:
            logger.warning(f"Email delivery disabled, not sending {kind.value} to {recipient}")
            return False

        paragraphs = "".join(f"<p>{line}</p>" for line in body.split("\n\n"))
        message = Mail(
            from_email=(self.sender, self.sender_name),
            to_emails=recipient,
            subject=subject,
            plain_text_content=f"Hi,\n\n{body}",
            html_content=f"<p>Hi,</p>{paragraphs}",
        )

        logger.info(f"Sending {kind.value} email to {recipient}")
        try:
            response = SendGridAPIClient(self.api_key).send(message)
        except Exception as e:
            logger.error(f"Failed to send {kind.value} email to {recipient}: {e}")
            return False

        if response.status_code not in (200, 202):
            logger.error(f"Failed to send email. StatusCode={response.status_code}")
            return False
        return True


def get_notifier() -> EmailService:
    """FastAPI dependency for the notification sender"""
    return EmailService()
