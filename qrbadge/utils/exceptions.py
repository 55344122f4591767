# =======================================================================================
# qrbadge/utils/exceptions.py - Custom Exceptions
# =======================================================================================
class QRBadgeError(Exception):
    """Base exception for the QR badge system; carries the HTTP status to answer with."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class InvalidInputError(QRBadgeError):
    """Raised when a field is malformed or out of range."""
    status_code = 400

class UnauthorizedError(QRBadgeError):
    """Raised for missing, invalid or expired tokens and bad login credentials."""
    status_code = 401

class ForbiddenError(QRBadgeError):
    """Raised when a badge is inactive or expired."""
    status_code = 403

class NotFoundError(QRBadgeError):
    """Raised when a referenced badge, access or user does not exist."""
    status_code = 404

class ConflictError(QRBadgeError):
    """Raised on uniqueness violations (QR code, email)."""
    status_code = 400
