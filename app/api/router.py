from fastapi import APIRouter

from app.api.routes.airport_pickups import router as airport_pickups_router
from app.api.routes.audit_logs import router as audit_logs_router
from app.api.routes.auth import router as auth_router
from app.api.routes.customers import router as customers_router
from app.api.routes.employees import router as employees_router
from app.api.routes.payments import router as payments_router
from app.api.routes.vehicles import router as vehicles_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(audit_logs_router)
api_router.include_router(employees_router)
api_router.include_router(customers_router)
api_router.include_router(vehicles_router)
api_router.include_router(airport_pickups_router)
api_router.include_router(payments_router)
