class ConciergerieError(Exception):
    """
    Base error for the backend.
    Carries the HTTP status and the public message sent back to clients.
    """

    status_code = 500
    message = "Erreur interne"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class MissingTenantError(ConciergerieError):
    status_code = 400
    message = "x-client-id header is required"


class InvalidTenantError(ConciergerieError):
    status_code = 400
    message = "x-client-id header is invalid"


class TaskNotFound(ConciergerieError):
    status_code = 404
    message = "Tâche non trouvée"


class StorageError(ConciergerieError):
    status_code = 500
    message = "Erreur de stockage"


class SyncError(ConciergerieError):
    status_code = 500
    message = "Erreur lors de la synchronisation"

    def __init__(self, details: str, message: str | None = None):
        super().__init__(message)
        self.details = details
