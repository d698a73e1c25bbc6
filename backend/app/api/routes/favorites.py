from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_self
from app.models.user import User
from app.schemas.password import MessageOut
from app.schemas.vehicle import FavoriteCreate, VehicleOut
from app.services import vehicles

router = APIRouter()


@router.get("/users/{user_id}/favorites", response_model=list[VehicleOut])
def list_favorites(current_user: User = Depends(require_self), db: Session = Depends(get_db)) -> list[VehicleOut]:
    return vehicles.list_favorites(db, current_user.id)


@router.post("/users/{user_id}/favorites", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteCreate,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
):
    created = vehicles.add_favorite(db, user_id=current_user.id, vehicle_id=payload.vehicle_id)
    if not created:
        return JSONResponse(status_code=status.HTTP_200_OK, content={"message": "Vehicle already in favorites"})
    return MessageOut(message="Vehicle added to favorites")


@router.delete("/users/{user_id}/favorites/{vehicle_id}", response_model=MessageOut)
def remove_favorite(
    vehicle_id: int,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> MessageOut:
    vehicles.remove_favorite(db, user_id=current_user.id, vehicle_id=vehicle_id)
    return MessageOut(message="Vehicle removed from favorites")
