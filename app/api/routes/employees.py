from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import AuthContext, read_upload, require_permissions, validate_form
from app.api.serializers import employee_out, pagination_out, role_out
from app.core.utils import success_response
from app.db.session import get_db
from app.models.permissions import Permission
from app.schemas.employee import EmployeeCreateForm, EmployeePatch, RoleIn
from app.services import employee_service
from app.services.email_service import send_employee_welcome
from app.services.storage_service import upload_image_file

router = APIRouter(prefix="/employees", tags=["employees"])

MAX_PAGE_SIZE = 40
DEFAULT_PAGE_SIZE = 30


# -------------------------
# ROLES (declared before /{employee_id} so "roles" is not taken as an id)
# -------------------------
@router.get("/roles")
def list_roles(page: int = Query(1, ge=1), limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
               db: Session = Depends(get_db),
               _auth: AuthContext = Depends(require_permissions(Permission.VIEW_EMPLOYEE_ROLE))):
    roles, total = employee_service.list_roles(db, page, limit)
    return success_response("Roles", {"roles": [role_out(r) for r in roles], "pagination": pagination_out(total, page, limit)})


@router.get("/roles/{slug}")
def get_role(slug: str, db: Session = Depends(get_db),
             _auth: AuthContext = Depends(require_permissions(Permission.VIEW_EMPLOYEE_ROLE))):
    role = employee_service.get_role_by_slug(db, slug)
    return success_response("Role", {**role_out(role), "employees": [employee_out(e) for e in role.employees]})


@router.post("/roles", status_code=201)
def create_role(body: RoleIn, db: Session = Depends(get_db),
                auth: AuthContext = Depends(require_permissions(Permission.CREATE_EMPLOYEE_ROLE))):
    role = employee_service.create_role(db, auth.employee, body.name, body.permissions)
    return success_response("Role created", role_out(role))


@router.put("/roles/{slug}")
def update_role(slug: str, body: RoleIn, db: Session = Depends(get_db),
                auth: AuthContext = Depends(require_permissions(Permission.EDIT_EMPLOYEE_ROLE))):
    role = employee_service.update_role(db, auth.employee, slug, body.name, body.permissions)
    return success_response("Role updated", role_out(role))


@router.delete("/roles/{role_id}")
def delete_role(role_id: str, db: Session = Depends(get_db),
                auth: AuthContext = Depends(require_permissions(Permission.DELETE_EMPLOYEE_ROLE))):
    employee_service.delete_role(db, auth.employee, role_id)
    return success_response("Role deleted")


# -------------------------
# EMPLOYEES
# -------------------------
@router.get("")
def list_employees(page: int = Query(1, ge=1), limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                   db: Session = Depends(get_db),
                   _auth: AuthContext = Depends(require_permissions(Permission.VIEW_EMPLOYEE))):
    employees, total = employee_service.list_employees(db, page, limit)
    return success_response("Employees", {
        "employees": [employee_out(e) for e in employees],
        "pagination": pagination_out(total, page, limit),
    })


@router.get("/{employee_id}")
def get_employee(employee_id: str, db: Session = Depends(get_db),
                 _auth: AuthContext = Depends(require_permissions(Permission.VIEW_EMPLOYEE))):
    return success_response("Employee", employee_out(employee_service.get_employee(db, employee_id)))


@router.post("", status_code=201)
def create_employee(background: BackgroundTasks,
                    name: str = Form(...),
                    phoneNumber: str = Form(...),
                    password: str = Form(...),
                    email: str | None = Form(None),
                    type: str = Form("admin"),
                    roleId: str | None = Form(None),
                    photo: UploadFile = File(...),
                    db: Session = Depends(get_db),
                    auth: AuthContext = Depends(require_permissions(Permission.CREATE_EMPLOYEE))):
    form = validate_form(EmployeeCreateForm, name=name, phoneNumber=phoneNumber, password=password,
                         email=email, type=type, roleId=roleId)
    photo_url = upload_image_file(read_upload(photo), "employees")
    employee = employee_service.create_employee(
        db, auth.employee,
        name=form.name, email=form.email, phone_number=form.phoneNumber, password=form.password,
        type=form.type, role_id=form.roleId, photo_url=photo_url,
    )
    if employee.user.email:
        background.add_task(send_employee_welcome, employee.user.email, employee.user.name,
                            employee.role.name if employee.role else None)
    return success_response("Employee created", employee_out(employee))


@router.patch("/{employee_id}")
def update_employee(employee_id: str, body: EmployeePatch, db: Session = Depends(get_db),
                    auth: AuthContext = Depends(require_permissions(Permission.EDIT_EMPLOYEE))):
    employee = employee_service.update_employee(
        db, auth.employee, employee_id, role_id=body.roleId, is_active=body.isActive, type=body.type
    )
    return success_response("Employee updated", employee_out(employee))
