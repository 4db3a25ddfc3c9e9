# Import every model so relationship() targets resolve and Alembic sees the full metadata.
from app.db.session import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.session import Session  # noqa: F401
from app.models.employee_role import EmployeeRole  # noqa: F401
from app.models.employee import Employee  # noqa: F401
from app.models.customer import Customer  # noqa: F401
from app.models.vehicle import Vehicle  # noqa: F401
from app.models.airport import Airport  # noqa: F401
from app.models.ride_option import AirportPickupRideOption  # noqa: F401
from app.models.booking import AirportPickupBooking  # noqa: F401
from app.models.payment import AirportPickupBookingPayment  # noqa: F401
from app.models.audit_log import AuditLog  # noqa: F401
