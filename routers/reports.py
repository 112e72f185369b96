from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.response import DataResponse, success_response
from database.connection import get_db
from models.user import User
from schemas.report import SummaryReport
from services.auth import require_permission
from services.metrics import summary_report

router = APIRouter()


@router.get("/summary", response_model=DataResponse[SummaryReport])
def get_summary(
    current_user: User = Depends(require_permission("reports:summary")),
    db: Session = Depends(get_db)
):
    return success_response(summary_report(db))
