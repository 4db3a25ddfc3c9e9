from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import AuthContext, read_upload, require_permissions, validate_form
from app.api.serializers import vehicle_out
from app.core.utils import success_response
from app.db.session import get_db
from app.models.permissions import Permission
from app.schemas.vehicle import VehicleForm
from app.services import vehicle_service
from app.services.storage_service import upload_image_file

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("")
def list_vehicles(db: Session = Depends(get_db),
                  _auth: AuthContext = Depends(require_permissions(Permission.VIEW_VEHICLE))):
    return success_response("Vehicles", [vehicle_out(v) for v in vehicle_service.list_vehicles(db)])


@router.post("", status_code=201)
def create_vehicle(name: str = Form(...),
                   seats: str = Form(...),
                   plateNumber: str = Form(...),
                   color: str | None = Form(None),
                   photo: UploadFile = File(...),
                   db: Session = Depends(get_db),
                   auth: AuthContext = Depends(require_permissions(Permission.CREATE_VEHICLE))):
    form = validate_form(VehicleForm, name=name, seats=seats, plateNumber=plateNumber, color=color)
    photo_url = upload_image_file(read_upload(photo), "vehicles")
    vehicle = vehicle_service.create_vehicle(db, auth.employee, name=form.name, seats=form.seats,
                                             plate_number=form.plateNumber, color=form.color, photo_url=photo_url)
    return success_response("Vehicle created", vehicle_out(vehicle))
