from datetime import timedelta

import pytest

from cineman.auth.utils import _create_token, create_refresh_token, verify_password
from cineman.config import settings
from cineman.models import User
from cineman.notifications import NotificationKind
from tests.conftest import PASSWORD, make_user

AUTH = "/api/v1/auth"


def register(client, email="new@example.com", password=PASSWORD):
    return client.post(f"{AUTH}/register", json={"email": email, "password": password})


def login(client, email, password=PASSWORD):
    return client.post(f"{AUTH}/login", json={"email": email, "password": password})


def access_headers(client, email, password=PASSWORD):
    refresh_token = login(client, email, password).json()["result"]["token"]
    access_token = client.post(f"{AUTH}/refresh", json={"refreshToken": refresh_token}).json()["result"]["token"]
    return {"Authorization": f"Bearer {access_token}"}


def fetch_user(db, email):
    db.expire_all()
    return db.query(User).filter(User.email == email).first()


def test_register_sends_confirmation(client, db, notifier):
    response = register(client)

    assert response.status_code == 201
    assert response.json()["result"] is None
    user = fetch_user(db, "new@example.com")
    assert not user.is_email_confirmed
    assert user.password != PASSWORD
    assert verify_password(PASSWORD, user.password)
    [(recipient, kind, payload)] = notifier.sent
    assert recipient == "new@example.com"
    assert kind == NotificationKind.EMAIL_CONFIRMATION
    assert payload["token"] == user.confirmation_token


def test_register_existing_confirmed_email(client, user):
    response = register(client, email=user.email)

    assert response.status_code == 400
    assert response.json()["title"] == "user.email.alreadyexists"


def test_register_existing_unconfirmed_email(client, db):
    make_user(db, email="pending@example.com", confirmed=False)

    response = register(client, email="pending@example.com")

    assert response.status_code == 403
    assert response.json()["title"] == "user.existingemail.notconfirmed"


@pytest.mark.parametrize("email, password, title", [
    ("", PASSWORD, "user.register.credentialsnotprovided"),
    ("someone@example.com", "", "user.register.credentialsnotprovided"),
    ("not-an-email", PASSWORD, "user.email.formatinvalid"),
    ("someone@example.com", "abcdefgh", "user.password.policynotmet"),
    ("someone@example.com", "Ab1!", "user.password.policynotmet"),
])
def test_register_rejects_bad_input(client, email, password, title):
    response = register(client, email=email, password=password)

    assert response.status_code == 400
    assert response.json()["title"] == title


def test_wrong_password_gets_no_token(client, user):
    response = login(client, user.email, "Wr0ng!pass")

    assert response.status_code == 401
    assert "result" not in response.json()
    assert response.json()["title"] == "user.credentials.invalid"


def test_unknown_email_login(client):
    response = login(client, "ghost@example.com")

    assert response.status_code == 401


def test_login_refresh_and_use_access_token(client, user):
    refresh_token = login(client, user.email).json()["result"]["token"]

    response = client.post(f"{AUTH}/refresh", json={"refreshToken": refresh_token})

    assert response.status_code == 200
    access_token = response.json()["result"]["token"]
    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {access_token}"})
    assert me.status_code == 200
    assert me.json()["result"]["email"] == user.email


def test_refresh_token_is_not_an_access_token(client, user):
    refresh_token = login(client, user.email).json()["result"]["token"]

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {refresh_token}"})

    assert response.status_code == 401


def test_access_token_without_login_permission(client, user):
    token = _create_token(str(user.id), False, timedelta(minutes=5), settings.ACCESS_SECRET)

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403


def test_expired_refresh_token(client, user):
    token = create_refresh_token(str(user.id), expires_delta=timedelta(seconds=-1))

    response = client.post(f"{AUTH}/refresh", json={"refreshToken": token})

    assert response.status_code == 401
    assert response.json()["title"] == "user.refreshtoken.invalid"


def test_confirm_email(client, db, notifier):
    register(client)
    token = notifier.sent[0][2]["token"]

    response = client.post(f"{AUTH}/confirm-email", json={"token": token})

    assert response.status_code == 200
    user = fetch_user(db, "new@example.com")
    assert user.is_email_confirmed
    assert user.confirmation_token is None

    reused = client.post(f"{AUTH}/confirm-email", json={"token": token})
    assert reused.status_code == 400
    assert reused.json()["title"] == "user.confirmationtoken.invalid"


def test_change_email_takes_effect_after_confirmation(client, db, notifier, user, auth_headers):
    response = client.post(f"{AUTH}/change-email", headers=auth_headers, json={"newEmail": "moved@example.com"})

    assert response.status_code == 200
    assert fetch_user(db, "moviegoer@example.com") is not None
    recipient, kind, payload = notifier.sent[-1]
    assert recipient == "moved@example.com"
    assert kind == NotificationKind.EMAIL_CONFIRMATION

    client.post(f"{AUTH}/confirm-email", json={"token": payload["token"]})

    assert fetch_user(db, "moviegoer@example.com") is None
    assert fetch_user(db, "moved@example.com").id == user.id


def test_change_email_to_taken_address(client, db, notifier, user, auth_headers):
    make_user(db, email="taken@example.com")
    client.post(f"{AUTH}/change-email", headers=auth_headers, json={"newEmail": "taken@example.com"})

    response = client.post(f"{AUTH}/confirm-email", json={"token": notifier.sent[-1][2]["token"]})

    assert response.status_code == 400
    assert response.json()["title"] == "user.email.alreadyexists"


def test_change_email_requires_valid_address(client, auth_headers):
    response = client.post(f"{AUTH}/change-email", headers=auth_headers, json={"newEmail": "nope"})

    assert response.status_code == 400
    assert response.json()["title"] == "user.email.formatinvalid"


def test_change_password(client, user, auth_headers):
    wrong_old = client.post(f"{AUTH}/change-password", headers=auth_headers,
                            json={"oldPassword": "Wr0ng!pass", "newPassword": "N3w!passw"})
    assert wrong_old.json()["title"] == "user.oldpassword.incorrect"

    weak_new = client.post(f"{AUTH}/change-password", headers=auth_headers,
                           json={"oldPassword": PASSWORD, "newPassword": "weak"})
    assert weak_new.json()["title"] == "user.newpassword.policynotmet"

    response = client.post(f"{AUTH}/change-password", headers=auth_headers,
                           json={"oldPassword": PASSWORD, "newPassword": "N3w!passw"})

    assert response.status_code == 200
    assert login(client, user.email).status_code == 401
    assert login(client, user.email, "N3w!passw").status_code == 200


def test_forgot_password_for_unknown_email_reveals_nothing(client, notifier):
    response = client.post(f"{AUTH}/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 200
    assert notifier.sent == []


def test_forgot_password_needs_confirmed_email(client, db):
    make_user(db, email="pending@example.com", confirmed=False)

    response = client.post(f"{AUTH}/forgot-password", json={"email": "pending@example.com"})

    assert response.status_code == 400
    assert response.json()["title"] == "user.email.notconfirmed"


def test_reset_password_flow(client, notifier, user):
    client.post(f"{AUTH}/forgot-password", json={"email": user.email})
    [(_, kind, payload)] = notifier.sent
    assert kind == NotificationKind.PASSWORD_RESET

    bad_token = client.post(f"{AUTH}/reset-password", json={
        "email": user.email, "token": "not-the-token", "newPassword": "R3set!pass"
    })
    assert bad_token.status_code == 400
    assert bad_token.json()["title"] == "user.confirmationtoken.invalid"

    response = client.post(f"{AUTH}/reset-password", json={
        "email": user.email, "token": payload["token"], "newPassword": "R3set!pass"
    })

    assert response.status_code == 204
    assert notifier.sent[-1][1] == NotificationKind.PASSWORD_CHANGED
    assert login(client, user.email, "R3set!pass").status_code == 200


def test_reset_password_for_unconfirmed_email(client, db):
    make_user(db, email="pending@example.com", confirmed=False)

    response = client.post(f"{AUTH}/reset-password", json={
        "email": "pending@example.com", "token": "guess", "newPassword": "R3set!pass"
    })

    assert response.status_code == 403
    assert response.json()["title"] == "user.email.notconfirmed"


def test_full_signup_journey(client, notifier):
    register(client, email="journey@example.com")
    client.post(f"{AUTH}/confirm-email", json={"token": notifier.sent[0][2]["token"]})

    headers = access_headers(client, "journey@example.com")

    assert client.get("/api/v1/bookings", headers=headers).status_code == 200


def test_reset_token_cannot_promote_staged_email(client, db, notifier, user, auth_headers):
    client.post(f"{AUTH}/change-email", headers=auth_headers, json={"newEmail": "unproven@example.com"})
    client.post(f"{AUTH}/forgot-password", json={"email": user.email})
    reset_token = notifier.of_kind(NotificationKind.PASSWORD_RESET)[0][2]["token"]

    client.post(f"{AUTH}/confirm-email", json={"token": reset_token})

    assert fetch_user(db, "unproven@example.com") is None
    assert fetch_user(db, "moviegoer@example.com").temp_email is None


def test_raising_notifier_does_not_fail_committed_registration(client, db, notifier):
    notifier.error = RuntimeError("mail relay down")

    response = register(client)

    assert response.status_code == 201
    assert fetch_user(db, "new@example.com") is not None
