from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_self
from app.models.user import User
from app.schemas.comparison import ComparisonCreate, ComparisonOut
from app.schemas.password import MessageOut
from app.services import comparisons

router = APIRouter()


@router.get("/users/{user_id}/comparisons", response_model=list[ComparisonOut])
def list_comparisons(current_user: User = Depends(require_self), db: Session = Depends(get_db)) -> list[ComparisonOut]:
    return comparisons.list_comparisons(db, current_user.id)


@router.post("/users/{user_id}/comparisons", response_model=ComparisonOut, status_code=status.HTTP_201_CREATED)
def create_comparison(
    payload: ComparisonCreate,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> ComparisonOut:
    return comparisons.create_comparison(db, user_id=current_user.id, vehicle_ids=payload.vehicle_ids)


@router.delete("/users/{user_id}/comparisons/{comparison_id}", response_model=MessageOut)
def delete_comparison(
    comparison_id: int,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> MessageOut:
    comparisons.delete_comparison(db, user_id=current_user.id, comparison_id=comparison_id)
    return MessageOut(message="Comparison deleted")
