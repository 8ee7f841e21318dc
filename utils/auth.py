"""
Contraseña única de administrador
Acepta hash bcrypt o el texto plano legado mientras dura la transición
"""
from passlib.context import CryptContext
from passlib.exc import UnknownHashError


# Contexto de encriptación para passwords
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _truncate(password: str) -> str:
    # Bcrypt tiene un límite de 72 bytes
    if len(password.encode('utf-8')) > 72:
        password = password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
    return password


def is_hashed(stored: str) -> bool:
    return pwd_context.identify(stored) is not None


def verify_admin_password(plain_password: str, stored: str) -> bool:
    """Verifica contra el hash guardado, o contra el texto plano legado"""
    if not plain_password or not stored:
        return False
    try:
        if is_hashed(stored):
            return pwd_context.verify(_truncate(plain_password), stored)
    except (UnknownHashError, ValueError):
        return False
    return plain_password == stored
