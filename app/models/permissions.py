import enum


class Permission(str, enum.Enum):
    VIEW_EMPLOYEE = "view employee"
    CREATE_EMPLOYEE = "create employee"
    EDIT_EMPLOYEE = "edit employee"
    DELETE_EMPLOYEE = "delete employee"

    VIEW_EMPLOYEE_ROLE = "view employee role"
    CREATE_EMPLOYEE_ROLE = "create employee role"
    EDIT_EMPLOYEE_ROLE = "edit employee role"
    DELETE_EMPLOYEE_ROLE = "delete employee role"

    VIEW_VEHICLE = "view vehicle"
    CREATE_VEHICLE = "create vehicle"
    EDIT_VEHICLE = "edit vehicle"
    DELETE_VEHICLE = "delete vehicle"

    VIEW_AIRPORT = "view airport"
    CREATE_AIRPORT = "create airport"
    EDIT_AIRPORT = "edit airport"
    DELETE_AIRPORT = "delete airport"

    VIEW_CUSTOMER = "view customer"
    EDIT_CUSTOMER = "edit customer"

    VIEW_AIRPORT_PICKUP_BOOKING = "view airport pickup booking"
    EDIT_AIRPORT_PICKUP_BOOKING = "edit airport pickup booking"

    VIEW_AUDIT_LOGS = "view audit logs"


PERMISSION_GROUPS: dict[str, list[Permission]] = {
    "employee": [Permission.VIEW_EMPLOYEE, Permission.CREATE_EMPLOYEE, Permission.EDIT_EMPLOYEE, Permission.DELETE_EMPLOYEE],
    "employeeRole": [
        Permission.VIEW_EMPLOYEE_ROLE,
        Permission.CREATE_EMPLOYEE_ROLE,
        Permission.EDIT_EMPLOYEE_ROLE,
        Permission.DELETE_EMPLOYEE_ROLE,
    ],
    "vehicle": [Permission.VIEW_VEHICLE, Permission.CREATE_VEHICLE, Permission.EDIT_VEHICLE, Permission.DELETE_VEHICLE],
    "airport": [Permission.VIEW_AIRPORT, Permission.CREATE_AIRPORT, Permission.EDIT_AIRPORT, Permission.DELETE_AIRPORT],
    "customer": [Permission.VIEW_CUSTOMER, Permission.EDIT_CUSTOMER],
    "airportPickupBooking": [Permission.VIEW_AIRPORT_PICKUP_BOOKING, Permission.EDIT_AIRPORT_PICKUP_BOOKING],
    "auditLogs": [Permission.VIEW_AUDIT_LOGS],
}

ALL_PERMISSIONS: list[str] = [p.value for group in PERMISSION_GROUPS.values() for p in group]
