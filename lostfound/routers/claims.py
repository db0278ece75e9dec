from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from sqlmodel import Session

from lostfound.db.db import get_session
from lostfound.models.user import User
from lostfound.services import claims as claim_service
from lostfound.services.notifications import schedule_delivery
from lostfound.utils.auth_helper import get_request_user
from lostfound.utils.mailer import get_notifier

router = APIRouter()


class ClaimCreateRequest(BaseModel):
    found_item_id: Optional[int] = None
    security_answer_attempt: Optional[str] = None
    message: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str


@router.post("/create", status_code=201)
def create_claim(
    payload: ClaimCreateRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    claim = claim_service.create_claim(
        session,
        found_item_id=payload.found_item_id,
        claiming_user_id=user.id,
        security_answer_attempt=payload.security_answer_attempt,
        message=payload.message,
    )

    return {"message": "Claim submitted successfully", "claim_id": claim.id}


@router.get("/item/{found_item_id}")
def get_claims_for_item(
    found_item_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {"claims": claim_service.list_claims_for_item(session, found_item_id)}


@router.get("/user/my")
def get_my_claims(
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {"claims": claim_service.list_claims_for_user(session, user.id)}


@router.get("/{claim_id}")
def get_claim_by_id(
    claim_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {"claim": claim_service.get_claim(session, claim_id)}


@router.put("/status/{claim_id}")
def update_claim_status(
    claim_id: int,
    payload: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
    notifier=Depends(get_notifier),
):
    claim = claim_service.update_claim_status(session, claim_id, payload.status, actor=user)
    schedule_delivery(background_tasks, session, notifier)

    return {"message": f"Claim status updated to {claim.status}"}


@router.delete("/{claim_id}")
def delete_claim(
    claim_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    claim_service.delete_claim(session, claim_id, user.id)
    return {"message": "Claim deleted successfully"}
