from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import AuthContext, read_upload, require_customer, require_permissions, validate_form
from app.api.serializers import customer_out, customer_profile_out, pagination_out
from app.core.utils import success_response
from app.db.session import get_db
from app.models.permissions import Permission
from app.schemas.customer import CustomerPatchForm
from app.services import customer_service
from app.services.storage_service import upload_image_file

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("")
def list_customers(page: int = Query(1, ge=1), limit: int = Query(30, ge=1, le=40),
                   db: Session = Depends(get_db),
                   _auth: AuthContext = Depends(require_permissions(Permission.VIEW_CUSTOMER))):
    customers, total = customer_service.list_customers(db, page, limit)
    return success_response("Customers", {
        "customers": [customer_out(c) for c in customers],
        "pagination": pagination_out(total, page, limit),
    })


@router.patch("")
def update_profile(name: str | None = Form(None),
                   phoneNumber: str | None = Form(None),
                   photo: UploadFile | None = File(None),
                   db: Session = Depends(get_db),
                   auth: AuthContext = Depends(require_customer)):
    form = validate_form(CustomerPatchForm, name=name, phoneNumber=phoneNumber)
    data = read_upload(photo, required=False)
    photo_url = upload_image_file(data, "customers") if data is not None else None
    user = customer_service.update_profile(db, auth.user, name=form.name, phone_number=form.phoneNumber,
                                           photo_url=photo_url)
    return success_response("Profile updated", customer_profile_out(user))
