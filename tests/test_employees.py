import pytest

from app.api.routes import employees as employee_routes
from app.models.employee import Employee
from app.models.employee_role import EmployeeRole
from app.models.permissions import Permission
from app.models.user import User
from tests.factories import auth_headers, make_employee, make_role

ROLE_PERMISSIONS = [
    Permission.VIEW_EMPLOYEE_ROLE,
    Permission.CREATE_EMPLOYEE_ROLE,
    Permission.EDIT_EMPLOYEE_ROLE,
    Permission.DELETE_EMPLOYEE_ROLE,
]

PNG = b"fake-png-bytes"


@pytest.fixture()
def uploads(monkeypatch):
    calls = []

    def fake_upload(data, folder):
        calls.append((data, folder))
        return f"https://cdn.storage.test/pickups/{folder}/photo.png"

    monkeypatch.setattr(employee_routes, "upload_image_file", fake_upload)
    return calls


@pytest.fixture()
def welcome_mails(monkeypatch):
    sent = []
    monkeypatch.setattr(employee_routes, "send_employee_welcome", lambda *args: sent.append(args))
    return sent


# -------------------------
# ROLES
# -------------------------
def test_role_round_trip_and_full_replace(client, db):
    admin = make_employee(db, ROLE_PERMISSIONS)
    headers = auth_headers(db, admin.user)

    r = client.post("/employees/roles", json={"name": "Dispatch Team", "permissions": ["view employee"]}, headers=headers)
    assert r.status_code == 201, r.text
    assert r.json()["payload"]["slug"] == "dispatch-team"

    r = client.get("/employees/roles/dispatch-team", headers=headers)
    assert r.status_code == 200
    assert r.json()["payload"]["permissions"] == ["view employee"]

    r = client.put("/employees/roles/dispatch-team",
                   json={"name": "Dispatch Team", "permissions": ["view vehicle", "view airport"]}, headers=headers)
    assert r.status_code == 200
    r = client.get("/employees/roles/dispatch-team", headers=headers)
    assert r.json()["payload"]["permissions"] == ["view vehicle", "view airport"]


def test_role_rejects_unknown_or_empty_permissions(client, db):
    admin = make_employee(db, ROLE_PERMISSIONS)
    headers = auth_headers(db, admin.user)

    r = client.post("/employees/roles", json={"name": "Bad", "permissions": ["launch rockets"]}, headers=headers)
    assert r.status_code == 400
    r = client.post("/employees/roles", json={"name": "Empty", "permissions": []}, headers=headers)
    assert r.status_code == 400
    assert db.query(EmployeeRole).filter(EmployeeRole.name.in_(["Bad", "Empty"])).count() == 0


def test_duplicate_role_name_conflicts(client, db):
    admin = make_employee(db, ROLE_PERMISSIONS)
    headers = auth_headers(db, admin.user)
    body = {"name": "Drivers", "permissions": ["view vehicle"]}
    assert client.post("/employees/roles", json=body, headers=headers).status_code == 201
    assert client.post("/employees/roles", json=body, headers=headers).status_code == 409


def test_deleting_role_keeps_employees(client, db):
    admin = make_employee(db, ROLE_PERMISSIONS)
    doomed = make_role(db, [Permission.VIEW_VEHICLE], name="Temp")
    member = make_employee(db, role=doomed)

    r = client.delete(f"/employees/roles/{doomed.id}", headers=auth_headers(db, admin.user))
    assert r.status_code == 200
    db.expire_all()
    assert db.get(EmployeeRole, doomed.id) is None
    assert db.get(Employee, member.id).role_id is None


def test_role_routes_require_matching_permission(client, db):
    viewer = make_employee(db, [Permission.VIEW_EMPLOYEE_ROLE])
    r = client.post("/employees/roles", json={"name": "X", "permissions": ["view employee"]},
                    headers=auth_headers(db, viewer.user))
    assert r.status_code == 403


# -------------------------
# EMPLOYEES
# -------------------------
def test_pagination_limit_above_max_is_bad_request(client, db):
    admin = make_employee(db, [Permission.VIEW_EMPLOYEE])
    r = client.get("/employees", params={"page": 1, "limit": 41}, headers=auth_headers(db, admin.user))
    assert r.status_code == 400


def test_pagination_pages(client, db):
    admin = make_employee(db, [Permission.VIEW_EMPLOYEE])
    role = admin.role
    for _ in range(34):
        make_employee(db, role=role)
    headers = auth_headers(db, admin.user)

    r = client.get("/employees", params={"page": 1, "limit": 30}, headers=headers)
    assert r.status_code == 200
    payload = r.json()["payload"]
    assert len(payload["employees"]) == 30
    assert payload["pagination"] == {"total": 35, "page": 1, "limit": 30, "totalPages": 2}

    r = client.get("/employees", params={"page": 2, "limit": 30}, headers=headers)
    assert len(r.json()["payload"]["employees"]) == 5


def test_create_employee_uploads_photo_then_creates(client, db, uploads, welcome_mails):
    admin = make_employee(db, [Permission.CREATE_EMPLOYEE])
    role = make_role(db, [Permission.VIEW_VEHICLE], name="Drivers")

    r = client.post(
        "/employees",
        data={"name": "Okello Driver", "phoneNumber": "0772 111 222", "password": "driver-pass-1",
              "email": "okello@example.com", "type": "driver", "roleId": role.id},
        files={"photo": ("me.png", PNG, "image/png")},
        headers=auth_headers(db, admin.user),
    )
    assert r.status_code == 201, r.text
    payload = r.json()["payload"]
    assert payload["type"] == "driver"
    assert payload["role"]["name"] == "Drivers"
    assert payload["user"]["phoneNumber"] == "+256772111222"
    assert payload["user"]["photoUrl"].endswith("/employees/photo.png")
    assert uploads == [(PNG, "employees")]
    assert welcome_mails == [("okello@example.com", "Okello Driver", "Drivers")]


def test_create_employee_duplicate_phone_conflicts(client, db, uploads, welcome_mails):
    admin = make_employee(db, [Permission.CREATE_EMPLOYEE])
    r = client.post(
        "/employees",
        data={"name": "Copy", "phoneNumber": admin.user.phone_number, "password": "another-pass"},
        files={"photo": ("me.png", PNG, "image/png")},
        headers=auth_headers(db, admin.user),
    )
    assert r.status_code == 409
    assert db.query(User).count() == 1


def test_create_employee_requires_photo(client, db, uploads):
    admin = make_employee(db, [Permission.CREATE_EMPLOYEE])
    r = client.post(
        "/employees",
        data={"name": "No Photo", "phoneNumber": "0772111333", "password": "another-pass"},
        headers=auth_headers(db, admin.user),
    )
    assert r.status_code == 400
    assert uploads == []


def test_update_employee_role_and_status(client, db):
    admin = make_employee(db, [Permission.EDIT_EMPLOYEE, Permission.VIEW_EMPLOYEE])
    other = make_employee(db)
    new_role = make_role(db, [Permission.VIEW_AIRPORT], name="Airport Desk")
    headers = auth_headers(db, admin.user)

    r = client.patch(f"/employees/{other.id}", json={"roleId": new_role.id, "isActive": False}, headers=headers)
    assert r.status_code == 200
    assert r.json()["payload"]["role"]["slug"] == "airport-desk"
    assert r.json()["payload"]["user"]["isActive"] is False

    assert client.patch("/employees/missing", json={"isActive": True}, headers=headers).status_code == 404
