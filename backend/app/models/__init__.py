from app.models.comparison import UserComparison, comparison_vehicles  # noqa: F401
from app.models.favorite import FavoriteVehicle  # noqa: F401
from app.models.login_otp import LoginOtpChallenge  # noqa: F401
from app.models.opinion import VehicleOpinion  # noqa: F401
from app.models.password_reset import PasswordResetCode  # noqa: F401
from app.models.preference import UserPreference  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.vehicle import (  # noqa: F401
    Vehicle,
    VehicleBrand,
    VehicleCategory,
    VehicleModel,
    VehicleVersion,
)
