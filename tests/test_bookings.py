from decimal import Decimal

import pytest

from app.core.exceptions import NotFoundError, PaymentGatewayRejected, PaymentGatewayTimeout
from app.models.booking import AirportPickupBooking, BookingStatus
from app.models.payment import AirportPickupBookingPayment
from app.models.permissions import Permission
from app.services import booking_service
from tests.factories import auth_headers, make_airport, make_customer, make_employee, make_ride_option


def _body(airport, option, **overrides):
    body = {
        "airportId": airport.id,
        "rideOptionId": option.id,
        "dropOff": {"latitude": 0.3136, "longitude": 32.5811, "name": "Kampala Road"},
        "fare": 85000,
        "currency": "UGX",
        "note": "Two suitcases",
    }
    body.update(overrides)
    return body


def test_booking_creates_exactly_one_booking_and_pending_payment(client, db, fake_dpo):
    customer = make_customer(db)
    airport, option = make_airport(db), make_ride_option(db)

    r = client.post("/airport-pickups/bookings", json=_body(airport, option), headers=auth_headers(db, customer.user))
    assert r.status_code == 201, r.text
    payload = r.json()["payload"]
    assert payload["booking"]["status"] == "pending_payment"
    assert payload["payment"]["status"] == "pending"
    assert payload["paymentToken"] == "TT-123"
    assert payload["paymentError"] is None

    assert db.query(AirportPickupBooking).count() == 1
    assert db.query(AirportPickupBookingPayment).count() == 1
    booking = db.query(AirportPickupBooking).one()
    payment = db.query(AirportPickupBookingPayment).one()
    assert payment.booking_id == booking.id
    assert payment.amount == booking.fare == Decimal("85000")
    assert payment.method is None
    assert payment.transaction_token == "TT-123"

    call = fake_dpo.create_calls[0]
    assert call["company_ref"] == payment.id
    assert call["redirect_url"] == f"http://api.test/payments/{payment.id}/airport-pickups/success"
    assert call["back_url"] == f"http://api.test/payments/{payment.id}/airport-pickups/failure"


def test_unknown_airport_writes_nothing(client, db, fake_dpo):
    customer = make_customer(db)
    option = make_ride_option(db)
    body = _body(make_airport(db), option, airportId="00000000-0000-0000-0000-000000000000")

    r = client.post("/airport-pickups/bookings", json=body, headers=auth_headers(db, customer.user))
    assert r.status_code == 404
    assert r.json()["message"] == "Airport not found"
    assert db.query(AirportPickupBooking).count() == 0
    assert db.query(AirportPickupBookingPayment).count() == 0
    assert fake_dpo.create_calls == []


def test_inactive_ride_option_is_not_found(client, db):
    customer = make_customer(db)
    body = _body(make_airport(db), make_ride_option(db, is_active=False))
    r = client.post("/airport-pickups/bookings", json=body, headers=auth_headers(db, customer.user))
    assert r.status_code == 404
    assert r.json()["message"] == "Ride option not found"


def test_failure_mid_transaction_leaves_no_booking(db, monkeypatch):
    customer = make_customer(db)
    airport, option = make_airport(db), make_ride_option(db)

    def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(booking_service, "log_audit", boom)
    with pytest.raises(RuntimeError):
        booking_service.create_booking(db, customer, airport.id, option.id, {"latitude": 0.1, "longitude": 32.1},
                                       Decimal("1000"), "UGX")
    assert db.query(AirportPickupBooking).count() == 0
    assert db.query(AirportPickupBookingPayment).count() == 0


def test_service_raises_not_found_for_missing_airport(db):
    customer = make_customer(db)
    option = make_ride_option(db)
    with pytest.raises(NotFoundError):
        booking_service.create_booking(db, customer, "missing", option.id, {"latitude": 0, "longitude": 0},
                                       Decimal("10"), "USD")


@pytest.mark.parametrize("overrides", [
    {"fare": 0},
    {"fare": -5},
    {"currency": "EUR"},
    {"dropOff": {"latitude": 91, "longitude": 32.5}},
    {"dropOff": {"latitude": 0.3, "longitude": -181}},
])
def test_booking_input_validation(client, db, overrides):
    customer = make_customer(db)
    body = _body(make_airport(db), make_ride_option(db), **overrides)
    r = client.post("/airport-pickups/bookings", json=body, headers=auth_headers(db, customer.user))
    assert r.status_code == 400
    assert r.json()["errors"]


def test_fractional_ugx_fare_is_rejected(client, db, fake_dpo):
    customer = make_customer(db)
    body = _body(make_airport(db), make_ride_option(db), fare="85000.50")
    r = client.post("/airport-pickups/bookings", json=body, headers=auth_headers(db, customer.user))
    assert r.status_code == 400
    assert r.json()["errors"][0]["message"] == "UGX fares must be whole numbers"
    assert db.query(AirportPickupBooking).count() == 0
    assert fake_dpo.create_calls == []


def test_fractional_usd_fare_is_accepted(client, db, fake_dpo):
    customer = make_customer(db)
    body = _body(make_airport(db), make_ride_option(db), fare="120.50", currency="USD")
    r = client.post("/airport-pickups/bookings", json=body, headers=auth_headers(db, customer.user))
    assert r.status_code == 201
    assert r.json()["payload"]["payment"]["amount"] == "120.50"
    assert fake_dpo.create_calls[0]["amount"] == Decimal("120.50")


def test_gateway_timeout_still_returns_booking(client, db, fake_dpo):
    fake_dpo.create_error = PaymentGatewayTimeout()
    customer = make_customer(db)

    r = client.post("/airport-pickups/bookings", json=_body(make_airport(db), make_ride_option(db)),
                    headers=auth_headers(db, customer.user))
    assert r.status_code == 201
    payload = r.json()["payload"]
    assert payload["paymentToken"] is None
    assert payload["paymentError"] == "Payment gateway timed out"
    assert db.query(AirportPickupBookingPayment).one().status == "pending"


def test_gateway_rejection_marks_payment_failed(client, db, fake_dpo):
    fake_dpo.create_error = PaymentGatewayRejected(result_code="801", explanation="Request missing company token")
    customer = make_customer(db)

    r = client.post("/airport-pickups/bookings", json=_body(make_airport(db), make_ride_option(db)),
                    headers=auth_headers(db, customer.user))
    assert r.status_code == 201
    payload = r.json()["payload"]
    assert payload["paymentToken"] is None
    assert payload["paymentError"] == "Request missing company token"
    assert db.query(AirportPickupBookingPayment).one().status == "failed"
    assert db.query(AirportPickupBooking).one().status == BookingStatus.PENDING_PAYMENT.value


def test_employees_cannot_book(client, db):
    employee = make_employee(db)
    r = client.post("/airport-pickups/bookings", json=_body(make_airport(db), make_ride_option(db)),
                    headers=auth_headers(db, employee.user))
    assert r.status_code == 401


def test_booking_listing_scopes(client, db):
    airport, option = make_airport(db), make_ride_option(db)
    alice, bob = make_customer(db), make_customer(db)
    for customer in (alice, bob):
        booking_service.create_booking(db, customer, airport.id, option.id, {"latitude": 0.1, "longitude": 32.1},
                                       Decimal("5000"), "UGX")

    r = client.get("/airport-pickups/bookings", headers=auth_headers(db, alice.user))
    assert [b["customerId"] for b in r.json()["payload"]] == [alice.id]

    staff = make_employee(db, [Permission.VIEW_AIRPORT_PICKUP_BOOKING])
    r = client.get("/airport-pickups/bookings", headers=auth_headers(db, staff.user))
    assert len(r.json()["payload"]) == 2

    outsider = make_employee(db, [Permission.VIEW_VEHICLE])
    assert client.get("/airport-pickups/bookings", headers=auth_headers(db, outsider.user)).status_code == 403


def test_gateway_call_runs_outside_a_transaction(client, db, fake_dpo, monkeypatch):
    open_during_call = []
    create_token = fake_dpo.create_token

    def recording_create_token(**kwargs):
        open_during_call.append(db.in_transaction())
        return create_token(**kwargs)

    monkeypatch.setattr(fake_dpo, "create_token", recording_create_token)
    customer = make_customer(db)
    r = client.post("/airport-pickups/bookings", json=_body(make_airport(db, "EBB"), make_ride_option(db)),
                    headers=auth_headers(db, customer.user))
    assert r.status_code == 201
    assert open_during_call == [False]
    assert fake_dpo.create_calls[0]["service_description"] == "Airport pickup from Airport EBB"
    assert r.json()["payload"]["paymentToken"] == "TT-123"
