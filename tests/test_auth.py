import uuid
from datetime import datetime, timedelta, timezone

from app.models.audit_log import AuditLog
from app.models.customer import Customer
from app.models.permissions import Permission
from app.models.session import Session
from app.models.user import User
from tests.factories import PASSWORD, auth_headers, make_customer, make_employee, make_session


SIGNUP = {"name": "Amina Nakato", "email": "amina@example.com", "phoneNumber": "0772 555 010", "password": "long-enough-1"}


def test_signup_then_profile_returns_same_identity(client):
    r = client.post("/auth/customers/signup", json=SIGNUP)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["success"] is True
    session_id = body["payload"]["sessionId"]
    assert len(session_id) == 64

    r = client.get("/auth/customers", headers={"x-session-id": session_id})
    assert r.status_code == 200
    profile = r.json()["payload"]
    assert profile["name"] == "Amina Nakato"
    assert profile["email"] == "amina@example.com"
    assert profile["phoneNumber"] == "+256772555010"


def test_duplicate_email_signup_conflicts_without_partial_rows(client, db):
    assert client.post("/auth/customers/signup", json=SIGNUP).status_code == 201

    r = client.post("/auth/customers/signup", json={**SIGNUP, "phoneNumber": "+256772555011"})
    assert r.status_code == 409
    assert r.json() == {"success": False, "message": "A user with this email or phone number already exists", "code": 409}
    assert db.query(User).count() == 1
    assert db.query(Customer).count() == 1


def test_signup_claims_preregistered_customer(client, db):
    pre = Customer(id=str(uuid.uuid4()), name="Walk-in", phone_number="+256772555010")
    db.add(pre)
    db.commit()

    r = client.post("/auth/customers/signup", json=SIGNUP)
    assert r.status_code == 201
    db.expire_all()
    assert db.query(Customer).count() == 1
    claimed = db.get(Customer, pre.id)
    assert claimed.user_id == r.json()["payload"]["user"]["id"]
    assert claimed.name == "Amina Nakato"


def test_signup_validation_errors_are_listed_per_field(client):
    r = client.post("/auth/customers/signup", json={**SIGNUP, "phoneNumber": "12", "password": "short"})
    assert r.status_code == 400
    fields = {e["field"] for e in r.json()["errors"]}
    assert {"phoneNumber", "password"} <= fields


def test_expired_session_is_rejected(client, db):
    customer = make_customer(db)
    expired = make_session(db, customer.user, expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
    assert db.get(Session, expired.id) is not None

    r = client.get("/auth/customers", headers={"x-session-id": expired.id})
    assert r.status_code == 401


def test_missing_or_blank_header_is_unauthenticated(client):
    assert client.get("/auth/sessions").status_code == 401
    assert client.get("/auth/sessions", headers={"x-session-id": "  "}).status_code == 401
    assert client.get("/auth/sessions", headers={"x-session-id": "nope"}).status_code == 401


def test_disabled_user_is_forbidden(client, db):
    employee = make_employee(db, is_active=False)
    r = client.get("/auth/employees", headers=auth_headers(db, employee.user))
    assert r.status_code == 403


def test_wrong_account_type_is_unauthenticated(client, db):
    customer = make_customer(db)
    employee = make_employee(db)
    assert client.get("/auth/employees", headers=auth_headers(db, customer.user)).status_code == 401
    assert client.get("/auth/customers", headers=auth_headers(db, employee.user)).status_code == 401


def test_employee_login_creates_session_and_audits(client, db):
    employee = make_employee(db, [Permission.VIEW_EMPLOYEE])
    r = client.post("/auth/employees/login", json={"phoneNumber": employee.user.phone_number, "password": PASSWORD},
                    headers={"user-agent": "pytest-agent"})
    assert r.status_code == 200, r.text
    payload = r.json()["payload"]
    assert payload["user"]["employee"]["role"]["permissions"] == ["view employee"]

    session = db.get(Session, payload["sessionId"])
    assert session.user_id == employee.user_id
    assert session.user_agent == "pytest-agent"
    assert db.query(AuditLog).filter(AuditLog.performed_by_id == employee.id).count() == 1


def test_employee_login_with_bad_password_fails_and_audits(client, db):
    employee = make_employee(db)
    r = client.post("/auth/employees/login", json={"phoneNumber": employee.user.phone_number, "password": "wrong"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid phone number or password"
    assert db.query(Session).count() == 0
    assert db.query(AuditLog).count() == 1


def test_customer_login(client, db):
    customer = make_customer(db)
    r = client.post("/auth/customers/login", json={"email": customer.user.email, "password": PASSWORD})
    assert r.status_code == 200
    assert r.json()["payload"]["user"]["customer"]["id"] == customer.id

    r = client.post("/auth/customers/login", json={"email": customer.user.email, "password": "nope"})
    assert r.status_code == 400


def test_list_sessions_marks_current(client, db):
    customer = make_customer(db)
    other = make_session(db, customer.user)
    headers = auth_headers(db, customer.user)

    r = client.get("/auth/sessions", headers=headers)
    assert r.status_code == 200
    sessions = {s["id"]: s for s in r.json()["payload"]}
    assert set(sessions) == {other.id, headers["x-session-id"]}
    assert sessions[headers["x-session-id"]]["isCurrent"] is True
    assert sessions[other.id]["isCurrent"] is False
    assert sessions[other.id]["browser"] == "Chrome"
    assert sessions[other.id]["deviceType"] == "desktop"


def test_deleting_another_users_session_is_not_found(client, db):
    alice = make_customer(db)
    bob = make_customer(db)
    bobs_session = make_session(db, bob.user)

    r = client.delete(f"/auth/sessions/{bobs_session.id}", headers=auth_headers(db, alice.user))
    assert r.status_code == 404
    db.expire_all()
    assert db.get(Session, bobs_session.id) is not None


def test_delete_own_session(client, db):
    customer = make_customer(db)
    extra = make_session(db, customer.user)
    r = client.delete(f"/auth/sessions/{extra.id}", headers=auth_headers(db, customer.user))
    assert r.status_code == 200
    db.expire_all()
    assert db.get(Session, extra.id) is None


def test_path_session_id_is_not_the_header_session(client, db):
    customer = make_customer(db)
    headers = auth_headers(db, customer.user)
    other = make_session(db, customer.user)

    r = client.delete(f"/auth/sessions/{other.id}", headers=headers)
    assert r.status_code == 200
    assert client.get("/auth/customers", headers=headers).status_code == 200
    db.expire_all()
    assert db.get(Session, headers["x-session-id"]) is not None


def test_logout_ends_current_session(client, db):
    employee = make_employee(db)
    headers = auth_headers(db, employee.user)

    r = client.delete("/auth/logout", headers=headers)
    assert r.status_code == 200
    assert client.get("/auth/employees", headers=headers).status_code == 401
    assert db.query(AuditLog).filter(AuditLog.description.like("%logged out%")).count() == 1
