from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_self
from app.models.user import User
from app.schemas.password import MessageOut
from app.schemas.preference import PreferenceCreate, PreferenceOut, PreferenceUpdate
from app.schemas.user import ProfileStatsOut, UserProfileOut, UserUpdate
from app.services import preferences, profiles

router = APIRouter()


def _profile(db: Session, user: User, *, owner: bool) -> UserProfileOut:
    return UserProfileOut(
        id=user.id,
        email=user.email if owner else None,
        name=user.name,
        photo_url=user.photo_url,
        app_version=user.app_version,
        created_at=user.created_at,
        stats=ProfileStatsOut(**profiles.profile_stats(db, user.id)),
        preferences=(
            [PreferenceOut.model_validate(item) for item in preferences.list_preferences(db, user.id)]
            if owner
            else None
        ),
    )


@router.get("/users/{user_id}", response_model=UserProfileOut, response_model_exclude_none=True)
def get_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserProfileOut:
    user = profiles.get_user(db, user_id)
    return _profile(db, user, owner=user.id == current_user.id)


@router.put("/users/{user_id}", response_model=UserProfileOut, response_model_exclude_none=True)
@router.patch("/users/{user_id}", response_model=UserProfileOut, response_model_exclude_none=True)
def update_profile(
    payload: UserUpdate,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> UserProfileOut:
    changes = {field: getattr(payload, field) for field in payload.model_fields_set}
    user = profiles.update_profile(db, current_user, changes)
    return _profile(db, user, owner=True)


@router.delete("/users/{user_id}", response_model=MessageOut)
def delete_profile(current_user: User = Depends(require_self), db: Session = Depends(get_db)) -> MessageOut:
    profiles.delete_account(db, current_user)
    return MessageOut(message="Account deleted")


@router.get("/users/{user_id}/preferences", response_model=list[PreferenceOut])
def list_preferences(current_user: User = Depends(require_self), db: Session = Depends(get_db)) -> list[PreferenceOut]:
    return preferences.list_preferences(db, current_user.id)


@router.post("/users/{user_id}/preferences", response_model=PreferenceOut, status_code=status.HTTP_201_CREATED)
def create_preference(
    payload: PreferenceCreate,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> PreferenceOut:
    return preferences.create_preference(
        db,
        user_id=current_user.id,
        brand_id=payload.brand_id,
        category_id=payload.category_id,
        price_max=payload.price_max,
    )


@router.patch("/users/{user_id}/preferences/{preference_id}", response_model=PreferenceOut)
def update_preference(
    preference_id: int,
    payload: PreferenceUpdate,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> PreferenceOut:
    return preferences.update_preference(
        db,
        user_id=current_user.id,
        preference_id=preference_id,
        brand_id=payload.brand_id,
        category_id=payload.category_id,
        price_max=payload.price_max,
    )


@router.delete("/users/{user_id}/preferences/{preference_id}", response_model=MessageOut)
def delete_preference(
    preference_id: int,
    current_user: User = Depends(require_self),
    db: Session = Depends(get_db),
) -> MessageOut:
    preferences.delete_preference(db, user_id=current_user.id, preference_id=preference_id)
    return MessageOut(message="Preference deleted")
