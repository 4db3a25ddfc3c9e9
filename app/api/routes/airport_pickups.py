import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import (
    AuthContext,
    get_current_auth,
    read_upload,
    require_customer,
    require_employee,
    require_permissions,
    validate_form,
)
from app.api.serializers import airport_out, booking_out, payment_out, ride_option_out
from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.utils import success_response
from app.db.session import get_db
from app.models.permissions import Permission
from app.schemas.airport import AirportIn, AirportPatch, RideOptionForm
from app.schemas.booking import BookingCreate, BookingStatusIn
from app.services import airport_service, booking_service
from app.services.auth_service import has_permission
from app.services.payment_service import request_payment_token
from app.services.storage_service import upload_image_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/airport-pickups", tags=["airport-pickups"])

_AIRPORT_FIELDS = {"name": "name", "code": "code", "latitude": "latitude", "longitude": "longitude", "isActive": "is_active"}


# -------------------------
# AIRPORTS
# -------------------------
@router.post("/airports", status_code=201)
def create_airport(body: AirportIn, db: Session = Depends(get_db),
                   auth: AuthContext = Depends(require_permissions(Permission.CREATE_AIRPORT))):
    airport = airport_service.create_airport(db, auth.employee, name=body.name, code=body.code,
                                             latitude=body.latitude, longitude=body.longitude,
                                             is_active=body.isActive)
    return success_response("Airport created", airport_out(airport))


@router.get("/airports")
def list_airports(db: Session = Depends(get_db), _auth: AuthContext = Depends(require_employee)):
    return success_response("Airports", [airport_out(a) for a in airport_service.list_airports(db)])


@router.get("/airports/public")
def list_public_airports(db: Session = Depends(get_db), _auth: AuthContext = Depends(get_current_auth)):
    return success_response("Airports", [airport_out(a) for a in airport_service.list_airports(db, active_only=True)])


@router.put("/airports/{airport_id}")
def update_airport(airport_id: str, body: AirportPatch, db: Session = Depends(get_db),
                   auth: AuthContext = Depends(require_permissions(Permission.EDIT_AIRPORT))):
    changes = {_AIRPORT_FIELDS[k]: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    airport = airport_service.update_airport(db, auth.employee, airport_id, changes)
    return success_response("Airport updated", airport_out(airport))


@router.delete("/airports/{airport_id}")
def delete_airport(airport_id: str, db: Session = Depends(get_db),
                   auth: AuthContext = Depends(require_permissions(Permission.DELETE_AIRPORT))):
    airport_service.delete_airport(db, auth.employee, airport_id)
    return success_response("Airport deleted")


# -------------------------
# RIDE OPTIONS
# -------------------------
@router.post("/ride-options", status_code=201)
def create_ride_option(name: str = Form(...),
                       pricePerMileUGX: str = Form(...),
                       pricePerMileUSD: str = Form(...),
                       photo: UploadFile = File(...),
                       db: Session = Depends(get_db),
                       auth: AuthContext = Depends(require_permissions(Permission.CREATE_AIRPORT))):
    form = validate_form(RideOptionForm, name=name, pricePerMileUGX=pricePerMileUGX, pricePerMileUSD=pricePerMileUSD)
    photo_url = upload_image_file(read_upload(photo), "ride-options")
    option = airport_service.create_ride_option(db, auth.employee, name=form.name,
                                                price_per_mile_ugx=form.pricePerMileUGX,
                                                price_per_mile_usd=form.pricePerMileUSD, photo_url=photo_url)
    return success_response("Ride option created", ride_option_out(option))


@router.get("/ride-options")
def list_ride_options(db: Session = Depends(get_db)):
    return success_response("Ride options", [ride_option_out(o) for o in airport_service.list_ride_options(db)])


# -------------------------
# BOOKINGS
# -------------------------
@router.post("/bookings", status_code=201)
def create_booking(body: BookingCreate, db: Session = Depends(get_db),
                   auth: AuthContext = Depends(require_customer)):
    booking, payment = booking_service.create_booking(
        db, auth.customer,
        airport_id=body.airportId,
        ride_option_id=body.rideOptionId,
        drop_off=body.dropOff.model_dump(),
        fare=body.fare,
        currency=body.currency,
        note=body.note,
    )
    token = request_payment_token(db, booking, payment)
    if token.error:
        logger.warning("booking %s created without payment token: %s", booking.id, token.error)
    return success_response("Booking created", {
        "booking": booking_out(booking),
        "payment": payment_out(payment),
        "paymentToken": token.token,
        "paymentError": token.error,
    })


@router.get("/bookings")
def list_bookings(db: Session = Depends(get_db), auth: AuthContext = Depends(get_current_auth)):
    if auth.employee is not None:
        if not has_permission(auth.user, Permission.VIEW_AIRPORT_PICKUP_BOOKING):
            raise ForbiddenError()
        bookings = booking_service.list_bookings(db)
    elif auth.customer is not None:
        bookings = booking_service.list_bookings(db, customer_id=auth.customer.id)
    else:
        raise ForbiddenError()
    return success_response("Bookings", [
        {**booking_out(b), "payment": payment_out(b.payment), "airport": airport_out(b.airport)} for b in bookings
    ])


@router.patch("/bookings/{booking_id}/status")
def update_booking_status(booking_id: str, body: BookingStatusIn, db: Session = Depends(get_db),
                          auth: AuthContext = Depends(get_current_auth)):
    booking = booking_service.get_booking(db, booking_id)
    if auth.employee is None and (auth.customer is None or auth.customer.id != booking.customer_id):
        # customers only see their own bookings
        raise NotFoundError("Booking not found")
    booking = booking_service.transition_booking(db, booking, body.status, auth.user)
    return success_response("Booking status updated", {**booking_out(booking), "payment": payment_out(booking.payment)})
