"""
Guardado local de documentos de identidad escaneados
La ruta sale de huésped + fecha + habitación, así que re-subir sobrescribe
"""

import base64
import binascii
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from utils.errors import DocumentStorageError
from utils.logging_utils import log_error, log_event

_DATA_URL_HEADER = re.compile(r"^data:[^,]*,")
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")
DEFAULT_EXTENSION = "png"


def is_encoded_document(value: Optional[str]) -> bool:
    """True si value es un blob nuevo (data URL) y no una ruta ya guardada"""
    return bool(value) and value.startswith("data:")


def document_filename(guest_name: str, check_in: Union[datetime, str, None], room: str, extension: Optional[str]) -> str:
    clean_name = _UNSAFE_CHARS.sub("_", guest_name or "") or "guest"
    if isinstance(check_in, datetime):
        date_part = check_in.strftime("%Y-%m-%d")
    elif check_in:
        date_part = str(check_in).split("T")[0]
    else:
        date_part = datetime.utcnow().strftime("%Y-%m-%d")
    clean_room = _UNSAFE_CHARS.sub("_", room or "")
    ext = (extension or DEFAULT_EXTENSION).lstrip(".")
    return f"{date_part}_{clean_room}_{clean_name}.{ext}"


def save_identity_document(
    blob: str,
    guest_name: str,
    check_in: Union[datetime, str, None],
    room: str,
    extension: Optional[str],
    base_dir: Union[str, Path],
) -> str:
    """
    Decodifica y escribe el documento.

    Returns:
        ruta absoluta del archivo escrito

    Raises:
        DocumentStorageError: blob inválido o error de disco
    """
    payload = _DATA_URL_HEADER.sub("", blob or "", count=1)
    try:
        content = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise DocumentStorageError(f"Invalid document encoding: {e}") from e
    if not content:
        raise DocumentStorageError("Empty document")

    target_dir = Path(base_dir)
    full_path = target_dir / document_filename(guest_name, check_in, room, extension)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
    except OSError as e:
        log_error("documents", "admin", "Save ID document", f"path={full_path} error={e}")
        raise DocumentStorageError(f"Could not save document: {e}") from e

    resolved = str(full_path.resolve())
    log_event("documents", "admin", "Save ID document", f"path={resolved}")
    return resolved
