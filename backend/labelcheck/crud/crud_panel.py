from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Dict, Any
from labelcheck.models import PanelUpload, PanelType


def create_panel(db: Session, check_id: str, panel_type: PanelType, blob_url: str, file_name: str) -> PanelUpload:

    position = db.query(func.count(PanelUpload.id)).filter(PanelUpload.compliance_check_id == check_id).scalar()

    panel = PanelUpload(
        compliance_check_id=check_id,
        panel_type=panel_type,
        blob_url=blob_url,
        file_name=file_name,
        position=position
    )

    db.add(panel)
    db.commit()
    db.refresh(panel)

    return panel


def get_check_panels(db: Session, check_id: str) -> List[PanelUpload]:
    """Panels of a check in upload order"""
    return (
        db.query(PanelUpload)
        .filter(PanelUpload.compliance_check_id == check_id)
        .order_by(PanelUpload.position, PanelUpload.created_at)
        .all()
    )


def set_extracted_data(db: Session, panel: PanelUpload, extracted_data: Dict[str, Any]) -> PanelUpload:

    panel.extracted_data = extracted_data
    db.commit()

    return panel
