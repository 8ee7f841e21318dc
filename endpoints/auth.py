"""
Acceso de administrador (contraseña única)
"""
from fastapi import APIRouter, Depends

from config import Settings
from schemas.auth import PasswordCheck, PasswordCheckResult
from utils.auth import verify_admin_password
from utils.dependencies import get_app_settings
from utils.logging_utils import log_event


router = APIRouter(prefix="/auth", tags=["Autenticación"])


@router.post("/check-password", response_model=PasswordCheckResult)
def check_password(data: PasswordCheck, settings: Settings = Depends(get_app_settings)):
    valid = verify_admin_password(data.password, settings.admin_password)
    if not valid:
        log_event("auth", "admin", "Intento con password incorrecta", "")
    return PasswordCheckResult(valid=valid)
