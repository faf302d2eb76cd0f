from fastapi import APIRouter, Depends, File, Form, Header, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from tempfile import SpooledTemporaryFile
from typing import Optional
from labelcheck.core.config import settings
from labelcheck.database import get_db
from labelcheck.models import User, PanelType
from labelcheck.schema import PanelResponse, UploadUrlRequest, UploadUrlResponse, UploadConfirmRequest
from labelcheck.services.upload_service import upload_service
from labelcheck.services.storage import ObjectStore
from labelcheck.exceptions.base import ValidationException
from labelcheck.api.deps import get_current_user, get_object_store

router = APIRouter(prefix="/uploads", tags=["uploads"])


def _panel_type(value: str) -> PanelType:
    try:
        return PanelType(value)
    except ValueError:
        raise ValidationException(f"Unknown panel type: {value}")

@router.post("", response_model=PanelResponse, status_code=status.HTTP_201_CREATED)
def upload_panel(
    file: UploadFile = File(...),
    panel_type: str = Form(...),
    check_id: str = Form(...),
    current_user: User = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_db)
):

    if not file.filename:
        raise ValidationException("No file provided.")

    return upload_service.upload_panel(
        db, store, current_user,
        check_id=check_id,
        panel_type=_panel_type(panel_type),
        file_name=file.filename,
        data=file.file.read(),
        content_type=file.content_type
    )

# Body is the raw file; metadata travels in headers so the body can be streamed
@router.post("/stream", response_model=PanelResponse, status_code=status.HTTP_201_CREATED)
async def upload_panel_stream(
    request: Request,
    x_file_name: Optional[str] = Header(default=None),
    x_panel_type: Optional[str] = Header(default=None),
    x_check_id: Optional[str] = Header(default=None),
    current_user: User = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_db)
):

    if not x_file_name:
        raise ValidationException("File name is required (x-file-name header).")
    if not x_panel_type:
        raise ValidationException("Panel type is required (x-panel-type header).")
    if not x_check_id:
        raise ValidationException("Check ID is required (x-check-id header).")

    panel_type = _panel_type(x_panel_type)
    content_type = request.headers.get("content-type")

    # Memory stays bounded: large bodies spill to a temp file
    with SpooledTemporaryFile(max_size=settings.UPLOAD_SPOOL_MAX_BYTES) as spool:
        received = 0
        async for chunk in request.stream():
            spool.write(chunk)
            received += len(chunk)

        if received == 0:
            raise ValidationException("No body provided.")

        spool.seek(0)
        return await run_in_threadpool(
            upload_service.upload_panel,
            db, store, current_user,
            check_id=x_check_id,
            panel_type=panel_type,
            file_name=x_file_name,
            data=spool,
            content_type=content_type
        )

@router.post("/sas-url", response_model=UploadUrlResponse)
def create_upload_url(
    request: UploadUrlRequest,
    current_user: User = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_db)
):

    return upload_service.create_upload_url(db, store, current_user, request)

@router.post("/confirm", response_model=PanelResponse, status_code=status.HTTP_201_CREATED)
def confirm_upload(
    request: UploadConfirmRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return upload_service.confirm_upload(db, current_user, request)
