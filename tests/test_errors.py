import pytest

from cineman.errors import Error, ErrorCode, Result


def test_success_carries_value():
    result = Result.success(42)

    assert result.is_success
    assert not result.is_failure
    assert result.value == 42
    assert result.error is None


def test_failure_carries_error():
    result = Result.failure(ErrorCode.SEATS_NOT_AVAILABLE)

    assert result.is_failure
    assert result.error == Error(ErrorCode.SEATS_NOT_AVAILABLE)
    assert result.error.status_code == 404
    assert result.error.message == "booking.timeslot.seatsunavailable"


def test_value_of_failure_raises():
    with pytest.raises(ValueError):
        Result.failure(ErrorCode.BOOKING_NOT_FOUND).value


def test_status_codes():
    assert ErrorCode.CREDENTIALS_INVALID.status_code == 401
    assert ErrorCode.AGE_TOO_SMALL.status_code == 403
    assert ErrorCode.CONCURRENT_UPDATE.status_code == 409
    assert ErrorCode.SHOW_DATE_IN_PAST.status_code == 400


def test_results_are_immutable():
    result = Result.success()

    with pytest.raises(AttributeError):
        result.error = Error(ErrorCode.USER_NOT_FOUND)
