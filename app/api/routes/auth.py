from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from app.api.deps import AuthContext, get_current_auth, require_customer, require_employee
from app.api.serializers import customer_profile_out, employee_profile_out
from app.core.utils import success_response
from app.db.session import get_db
from app.schemas.auth import CustomerLoginIn, CustomerSignupIn, EmployeeLoginIn
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/employees/login")
def employee_login(body: EmployeeLoginIn, user_agent: str | None = Header(default=None),
                   db: Session = Depends(get_db)):
    user, session = auth_service.login_employee(db, body.phoneNumber, body.password, user_agent)
    return success_response("Login successful", {"sessionId": session.id, "user": employee_profile_out(user)})


@router.get("/employees")
def employee_profile(auth: AuthContext = Depends(require_employee)):
    return success_response("Employee profile", employee_profile_out(auth.user))


@router.post("/customers/signup", status_code=201)
def customer_signup(body: CustomerSignupIn, user_agent: str | None = Header(default=None),
                    db: Session = Depends(get_db)):
    user, _customer, session = auth_service.signup_customer(
        db, body.name, body.email, body.phoneNumber, body.password, user_agent
    )
    return success_response("Signup successful", {"sessionId": session.id, "user": customer_profile_out(user)})


@router.post("/customers/login")
def customer_login(body: CustomerLoginIn, user_agent: str | None = Header(default=None),
                   db: Session = Depends(get_db)):
    user, session = auth_service.login_customer(db, body.email, body.password, user_agent)
    return success_response("Login successful", {"sessionId": session.id, "user": customer_profile_out(user)})


@router.get("/customers")
def customer_profile(auth: AuthContext = Depends(require_customer)):
    return success_response("Customer profile", customer_profile_out(auth.user))


@router.get("/sessions")
def list_sessions(auth: AuthContext = Depends(get_current_auth), db: Session = Depends(get_db)):
    return success_response("Sessions", auth_service.list_sessions(db, auth.user, auth.session.id))


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, auth: AuthContext = Depends(get_current_auth), db: Session = Depends(get_db)):
    auth_service.delete_session(db, auth.user, session_id)
    db.commit()
    return success_response("Session deleted")


@router.delete("/logout")
def logout(auth: AuthContext = Depends(get_current_auth), db: Session = Depends(get_db)):
    auth_service.logout(db, auth.user, auth.session)
    return success_response("Logged out")
