from sqlalchemy.orm import Session
from typing import BinaryIO, Optional, Union
import logging
from labelcheck.core.config import settings
from labelcheck.crud import crud_check, crud_panel
from labelcheck.models import User, PanelType
from labelcheck.schema import PanelResponse, UploadUrlRequest, UploadUrlResponse, UploadConfirmRequest
from labelcheck.exceptions.check_exceptions import CheckNotFoundException
from labelcheck.services.storage import ObjectStore, build_object_key, content_type_for

logger = logging.getLogger(__name__)


class UploadService:
    # Buffered, streamed and pre-signed uploads all end the same way:
    # a blob URL recorded on a new PanelUpload row

    def _require_check(self, db: Session, user: User, check_id: str) -> None:
        if not crud_check.get_user_check(db, check_id, user.id):
            raise CheckNotFoundException()

    def upload_panel(
        self,
        db: Session,
        store: ObjectStore,
        user: User,
        check_id: str,
        panel_type: PanelType,
        file_name: str,
        data: Union[bytes, BinaryIO],
        content_type: Optional[str] = None
    ) -> PanelResponse:

        self._require_check(db, user, check_id)

        key = build_object_key(user.id, file_name)
        blob_url = store.put(data, key, content_type or content_type_for(file_name))

        panel = crud_panel.create_panel(db, check_id, panel_type, blob_url, file_name)
        logger.info(f"Registered {panel_type} panel {panel.id} for check {check_id}")

        return PanelResponse.model_validate(panel)

    def create_upload_url(self, db: Session, store: ObjectStore, user: User, request: UploadUrlRequest) -> UploadUrlResponse:

        self._require_check(db, user, request.check_id)

        key = build_object_key(user.id, request.file_name)
        upload = store.upload_url(key, settings.UPLOAD_URL_TTL_SECONDS, content_type_for(request.file_name))

        return UploadUrlResponse(
            sas_url=upload.sas_url,
            blob_url=upload.blob_url,
            blob_name=upload.blob_name,
            content_type=upload.content_type
        )

    def confirm_upload(self, db: Session, user: User, request: UploadConfirmRequest) -> PanelResponse:

        self._require_check(db, user, request.check_id)

        panel = crud_panel.create_panel(db, request.check_id, request.panel_type, request.blob_url, request.file_name)
        logger.info(f"Confirmed direct upload of {request.panel_type} panel {panel.id} for check {request.check_id}")

        return PanelResponse.model_validate(panel)


upload_service = UploadService()
