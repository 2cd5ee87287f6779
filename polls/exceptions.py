from rest_framework import status
from rest_framework.exceptions import APIException


class PollError(APIException):
    """Base class for failures raised by the poll catalog, response ledger and reports."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Poll operation failed."
    default_code = "poll_error"


class ValidationError(PollError):
    """Bad input caught before anything was written."""

    default_detail = "Invalid input."
    default_code = "invalid"


class DuplicateResponseError(ValidationError):
    default_detail = "You have already responded to this poll."
    default_code = "duplicate_response"


class NotFoundError(PollError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class OwnershipError(PollError):
    """The record belongs to somebody other than the requesting actor."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied."
    default_code = "ownership"


class StoreError(PollError):
    """The database rejected or failed a write or read."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The data store is unavailable, try again."
    default_code = "store_error"

    def __init__(self, detail=None, code=None, created=None):
        super().__init__(detail, code)
        self.created = list(created or [])
