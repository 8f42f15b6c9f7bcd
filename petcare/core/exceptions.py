"""Domain exceptions, rendered as `{"success": false, ...}` by the app handlers."""


class PosError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['success'] = False
        rv['message'] = self.message
        return rv


class ValidationError(PosError):
    """Bad input, detected before anything is written."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class NotFoundError(PosError):
    """Raised when a referenced document does not exist."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class AuthenticationError(PosError):
    """No (valid) identity attached to the request."""
    def __init__(self, message="Unauthorized"):
        super().__init__(message, 401)


class PermissionDeniedError(PosError):
    """Identity is valid but its role is not allowed to do this."""
    def __init__(self, message="You do not have permission to perform this action"):
        super().__init__(message, 403)


class AllocatorError(PosError):
    """The ID allocator could not issue an ID; nothing was created."""
    def __init__(self, collection_name):
        super().__init__(f"Could not allocate an ID for '{collection_name}'", 503)
        self.collection_name = collection_name
