from .api_client import ApiError, UserApiClient
from .console import SKILL_OPTIONS, Draft, RegistrationConsole

__all__ = ["ApiError", "Draft", "RegistrationConsole", "SKILL_OPTIONS", "UserApiClient"]
