from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from sqlmodel import Session

from lostfound.db.db import get_session
from lostfound.models.user import User
from lostfound.services import reports as report_service
from lostfound.services.notifications import schedule_delivery
from lostfound.utils.auth_helper import get_request_user
from lostfound.utils.mailer import get_notifier

router = APIRouter()


class ReportCreateRequest(BaseModel):
    lost_item_id: Optional[int] = None
    message: Optional[str] = None
    pickup_location: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str


@router.post("/", status_code=201)
def report_lost_item_found(
    payload: ReportCreateRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
    notifier=Depends(get_notifier),
):
    report = report_service.create_report(
        session,
        lost_item_id=payload.lost_item_id,
        finder_user_id=user.id,
        message=payload.message,
        pickup_location=payload.pickup_location,
    )
    schedule_delivery(background_tasks, session, notifier)

    return {"message": "Lost item reported and user notified via email.", "report_id": report.id}


@router.get("/user/my")
def get_reports_filed(
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {"reports": report_service.list_reports_filed(session, user.id)}


@router.get("/about-user-lost-items")
def get_reports_received(
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {"reports": report_service.list_reports_received(session, user.id)}


@router.get("/item/{lost_item_id}")
def get_reports_for_item(
    lost_item_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {"reports": report_service.list_reports_for_item(session, lost_item_id)}


@router.patch("/status/{report_id}")
def update_report_status(
    report_id: int,
    payload: StatusUpdateRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    report = report_service.update_report_status(session, report_id, payload.status, actor=user)
    return {"message": f"status updated to {report.status}"}


@router.delete("/{report_id}")
def delete_report(
    report_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    report_service.delete_report(session, report_id, user.id)
    return {"message": "Report deleted successfully."}
