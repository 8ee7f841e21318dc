"""
Errores tipados de la aplicación
Los endpoints los traducen a respuestas HTTP; nunca llegan crudos al usuario
"""


class BookingValidationError(ValueError):
    """Invalid booking input, reported before any persistence attempt"""

    INVALID_STAY = "invalid stay duration"
    REQUIRED_FIELD = "required field missing"

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field


class StoreError(Exception):
    """Insert/update/delete failure in a record store; the call had no effect"""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class SyncError(Exception):
    """OTA feed could not be fetched (network, timeout, bad response)"""


class DeliveryError(Exception):
    """Outbound e-mail could not be delivered"""


class DocumentStorageError(Exception):
    """Identity document could not be written to disk"""
