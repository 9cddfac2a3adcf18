"""
Error taxonomy for RSVP operations.

Exceptions cover conditions the caller cannot recover from within the same
request (missing records, rights, bad tokens). Business-rule rejections such
as a full event or an empty recipient list are returned as ``Rejection``
codes on result objects so routes can render a specific message.
"""

import enum


class RsvpError(Exception):
    """Base class for service-level failures"""

    error_code = "ERROR"

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class NotFound(RsvpError):
    """Record not found"""

    error_code = "NOT_FOUND"


class Unauthorized(RsvpError):
    """Event not found or unauthorized"""

    error_code = "UNAUTHORIZED"


class InvalidToken(RsvpError):
    """Invalid token"""

    error_code = "INVALID_TOKEN"


class TokenExpired(RsvpError):
    """Token has expired"""

    error_code = "TOKEN_EXPIRED"


class Rejection(str, enum.Enum):
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    NO_RECIPIENTS = "NO_RECIPIENTS"
    PARTIAL_DELIVERY_FAILURE = "PARTIAL_DELIVERY_FAILURE"
