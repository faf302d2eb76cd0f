from pydantic import BaseModel, Field
from labelcheck.models.compliance_check import PanelType


class UploadUrlRequest(BaseModel):

    file_name: str = Field(min_length=1)
    panel_type: PanelType
    check_id: str


class UploadUrlResponse(BaseModel):

    sas_url: str
    blob_url: str
    blob_name: str
    content_type: str


class UploadConfirmRequest(BaseModel):

    blob_url: str = Field(min_length=1)
    panel_type: PanelType
    check_id: str
    file_name: str = Field(min_length=1)
