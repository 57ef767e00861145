"""
Error catalog and result type shared by every domain service.

Services return a ``Result`` instead of raising for domain conditions
(missing records, capacity, state violations, credential failures). The
HTTP layer turns a failed result into a problem response whose status is
the error's status code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(Enum):
    """Closed set of domain errors: (message, details, status code)"""

    # Bookings
    BOOKING_NOT_FOUND = ("booking.id.notfound", "Make sure you're entering the right booking id", 404)
    CANCELLING_PAST_TICKETS = ("booking.cancelling.dateinpast", "You cannot cancel the tickets after the show has taken place.", 400)
    SHOW_ALREADY_CANCELLED = ("booking.show.alreadycancelled", "You cannot cancel the booking again", 400)
    SHOW_NOT_AVAILABLE = ("booking.show.unavailable", "This showtime is not available. Please refresh to get the updated shows", 404)
    TIME_SLOT_NOT_AVAILABLE = ("booking.timeslot.unavailable", "This show doesn't have the chosen timeslot available, kindly pick another.", 404)
    SEATS_NOT_AVAILABLE = ("booking.timeslot.seatsunavailable", "Requested number of seats not available in this timeslot. Try another.", 404)
    SHOW_DATE_IN_PAST = ("booking.showdate.isinpast", "You cannot book tickets of past shows", 400)
    CONCURRENT_UPDATE = ("booking.show.concurrentupdate", "The show was updated by another request. Please try again.", 409)

    # Movies
    MOVIE_NOT_FOUND = ("movie.id.notfound", "Please check if specified movie id is correct.", 404)

    # Users
    USER_NOT_FOUND = ("user.id.notfound", "User could not be found", 404)
    AGE_TOO_SMALL = ("user.age.tooyoung", "User age has to be atleast 13years", 403)
    INVALID_DATE = ("user.dateofbirth.invalid", "Date of birth cannot be in the future", 400)
    PASSWORD_EMPTY = ("user.password.empty", "Kindly enter valid password", 400)
    INCORRECT_OLD_PASSWORD = ("user.oldpassword.incorrect", "Make sure the old password is correct with proper casing", 400)
    INCORRECT_NEW_PASSWORD = ("user.newpassword.policynotmet", "Make sure the new password meets the password policy", 400)
    CREDENTIALS_INVALID = ("user.credentials.invalid", "Make sure the username/email and password are correct", 401)
    INVALID_REFRESH_TOKEN = ("user.refreshtoken.invalid", "Authenticate again!", 401)
    EMPTY_CREDENTIALS = ("user.register.credentialsnotprovided", "Please provide a valid email and password", 400)
    USER_ALREADY_EXISTS = ("user.email.alreadyexists", "Try to login from another email or reset your password", 400)
    PASSWORD_POLICY_NOT_MET = ("user.password.policynotmet", "1 Uppercase, 1 Lowercase, 1 Symbol, 1 Number", 400)
    TOKEN_INVALID = ("user.confirmationtoken.invalid", "Make sure the token specified is correct", 400)
    EMAIL_FORMAT_INVALID = ("user.email.formatinvalid", "Make sure you're entering the correct email address", 400)
    EMAIL_NOT_CONFIRMED = ("user.email.notconfirmed", "Please confirm your primary email address", 400)
    EMAIL_NOT_CONFIRMED_AND_PASSWORD_RESET = ("user.email.notconfirmed", "Your email wasn't confirmed, can't authorize forgot password. Please contact support", 403)
    EMAIL_NOT_CONFIRMED_AND_USER_EXISTS = ("user.existingemail.notconfirmed", "A user with this email already exists in the database, please confirm the email", 403)

    @property
    def message(self) -> str:
        return self.value[0]

    @property
    def details(self) -> str:
        return self.value[1]

    @property
    def status_code(self) -> int:
        return self.value[2]


@dataclass(frozen=True)
class Error:
    code: ErrorCode

    @property
    def message(self) -> str:
        return self.code.message

    @property
    def details(self) -> str:
        return self.code.details

    @property
    def status_code(self) -> int:
        return self.code.status_code


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a domain operation: a value or a typed error, never both"""

    _value: Optional[T] = None
    error: Optional[Error] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(_value=value)

    @classmethod
    def failure(cls, code: ErrorCode) -> "Result[T]":
        return cls(error=Error(code))

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @property
    def value(self) -> T:
        if self.is_failure:
            raise ValueError(f"Cannot get value from failed result: {self.error.message}")
        return self._value
