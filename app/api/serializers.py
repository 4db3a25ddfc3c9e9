"""Model -> camelCase dict conversions shared by the route modules."""

from datetime import datetime

from app.core.utils import total_pages
from app.models.airport import Airport
from app.models.audit_log import AuditLog
from app.models.booking import AirportPickupBooking
from app.models.customer import Customer
from app.models.employee import Employee
from app.models.employee_role import EmployeeRole
from app.models.payment import AirportPickupBookingPayment
from app.models.ride_option import AirportPickupRideOption
from app.models.user import User
from app.models.vehicle import Vehicle


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def role_out(r: EmployeeRole | None) -> dict | None:
    if r is None:
        return None
    return {
        "id": r.id,
        "name": r.name,
        "slug": r.slug,
        "permissions": list(r.permissions or []),
        "createdAt": _iso(r.created_at),
        "updatedAt": _iso(r.updated_at),
    }


def user_out(u: User) -> dict:
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "phoneNumber": u.phone_number,
        "photoUrl": u.photo_url,
        "isActive": u.is_active,
        "createdAt": _iso(u.created_at),
    }


def employee_out(e: Employee) -> dict:
    return {
        "id": e.id,
        "type": e.type,
        "isOnline": e.is_online,
        "user": user_out(e.user),
        "role": role_out(e.role),
        "createdAt": _iso(e.created_at),
    }


def employee_profile_out(u: User) -> dict:
    e = u.employee_account
    return {**user_out(u), "employee": {"id": e.id, "type": e.type, "isOnline": e.is_online, "role": role_out(e.role)}}


def customer_out(c: Customer) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "phoneNumber": c.phone_number,
        "userId": c.user_id,
        "email": c.user.email if c.user else None,
        "createdAt": _iso(c.created_at),
    }


def customer_profile_out(u: User) -> dict:
    c = u.customer_account
    return {**user_out(u), "customer": {"id": c.id, "name": c.name, "phoneNumber": c.phone_number}}


def vehicle_out(v: Vehicle) -> dict:
    return {
        "id": v.id,
        "name": v.name,
        "slug": v.slug,
        "seats": v.seats,
        "plateNumber": v.plate_number,
        "color": v.color,
        "primaryPhotoUrl": v.primary_photo_url,
        "isActive": v.is_active,
    }


def airport_out(a: Airport) -> dict:
    return {
        "id": a.id,
        "name": a.name,
        "code": a.code,
        "latitude": a.latitude,
        "longitude": a.longitude,
        "isActive": a.is_active,
    }


def ride_option_out(o: AirportPickupRideOption) -> dict:
    return {
        "id": o.id,
        "name": o.name,
        "pricePerMileUGX": str(o.price_per_mile_ugx),
        "pricePerMileUSD": str(o.price_per_mile_usd),
        "photoUrl": o.photo_url,
        "isActive": o.is_active,
    }


def payment_out(p: AirportPickupBookingPayment | None) -> dict | None:
    if p is None:
        return None
    return {
        "id": p.id,
        "bookingId": p.booking_id,
        "amount": str(p.amount),
        "currency": p.currency,
        "method": p.method,
        "status": p.status,
        "gatewayReference": p.gateway_reference,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def booking_out(b: AirportPickupBooking) -> dict:
    return {
        "id": b.id,
        "fare": str(b.fare),
        "currency": b.currency,
        "status": b.status,
        "airportId": b.airport_id,
        "rideOptionId": b.ride_option_id,
        "customerId": b.customer_id,
        "driverId": b.driver_id,
        "vehicleId": b.vehicle_id,
        "note": b.note,
        "dropOff": {
            "latitude": b.drop_off_latitude,
            "longitude": b.drop_off_longitude,
            "name": b.drop_off_location_name,
        },
        "createdAt": _iso(b.created_at),
        "updatedAt": _iso(b.updated_at),
    }


def audit_log_out(a: AuditLog) -> dict:
    return {
        "id": a.id,
        "description": a.description,
        "affectedResourceId": a.affected_resource_id,
        "affectedResourceType": a.affected_resource_type,
        "performedBy": {"id": a.performed_by.id, "name": a.performed_by.user.name} if a.performed_by else None,
        "createdAt": _iso(a.created_at),
    }


def pagination_out(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit, "totalPages": total_pages(total, limit)}
