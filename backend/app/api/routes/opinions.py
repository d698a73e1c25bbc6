from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.opinion import OpinionCreate, OpinionOut, OpinionUpdate
from app.schemas.password import MessageOut
from app.services import opinions

router = APIRouter()


@router.get("/vehicles/{vehicle_id}/opinions", response_model=list[OpinionOut])
def list_opinions(vehicle_id: int, db: Session = Depends(get_db)) -> list[OpinionOut]:
    return opinions.list_opinions(db, vehicle_id)


@router.post("/vehicles/{vehicle_id}/opinions", response_model=OpinionOut, status_code=status.HTTP_201_CREATED)
def post_opinion(
    vehicle_id: int,
    payload: OpinionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    opinion, created = opinions.upsert_opinion(
        db,
        vehicle_id=vehicle_id,
        user_id=current_user.id,
        rate=payload.rate,
        comment=payload.comment,
    )
    if not created:
        body = OpinionOut.model_validate(opinion).model_dump(mode="json", by_alias=True)
        return JSONResponse(status_code=status.HTTP_200_OK, content=body)
    return opinion


@router.patch("/vehicles/{vehicle_id}/opinions/{opinion_id}", response_model=OpinionOut)
def update_opinion(
    vehicle_id: int,
    opinion_id: int,
    payload: OpinionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> OpinionOut:
    changes = {}
    if "comment" in payload.model_fields_set:
        changes["comment"] = payload.comment
    return opinions.update_opinion(
        db,
        vehicle_id=vehicle_id,
        opinion_id=opinion_id,
        user_id=current_user.id,
        rate=payload.rate,
        **changes,
    )


@router.delete("/vehicles/{vehicle_id}/opinions/{opinion_id}", response_model=MessageOut)
def delete_opinion(
    vehicle_id: int,
    opinion_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageOut:
    opinions.delete_opinion(db, vehicle_id=vehicle_id, opinion_id=opinion_id, user_id=current_user.id)
    return MessageOut(message="Opinion deleted")
