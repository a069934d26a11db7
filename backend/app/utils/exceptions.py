"""Custom exceptions and error handling utilities."""
from fastapi import HTTPException, status
from typing import Any, Optional


class AppException(Exception):
    """Base exception for application errors."""
    pass


class NotFoundError(AppException):
    """Raised when a record is absent or not owned by the caller."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message)


class ValidationError(AppException):
    """Raised when validation fails."""
    pass


# Reasons caused by what the user typed rather than who they are
AUTH_INPUT_REASONS = {"weak_password", "email_required"}


class AuthError(AppException):
    """Raised for credential and session failures.

    ``reason`` keeps the provider-reported code.
    """

    def __init__(self, message: str = "Authentication failed", reason: str = "unknown"):
        self.reason = reason
        super().__init__(message)


class DocumentStoreError(AppException):
    """Raised when the record store cannot complete a read or write."""
    pass


class GenerationFailed(AppException):
    """Raised when the content generator errors or returns unusable output."""
    pass


class SaveFailed(AppException):
    """Raised when a save cannot complete.

    ``stage`` names the write that failed: ``"owner"`` (nothing was written) or
    ``"public"`` (the owner record was written, the public copy was not).
    """

    def __init__(self, message: str, stage: str, site: Any = None):
        self.stage = stage
        self.site = site
        super().__init__(message)

    @property
    def partial(self) -> bool:
        return self.stage == "public"


class UnpublishFailed(AppException):
    """Raised when an unpublish cannot complete.

    ``stage`` is ``"public"`` when the public record could not be removed (nothing
    changed) or ``"owner"`` when the public record is gone but the status update failed.
    """

    def __init__(self, message: str, stage: str):
        self.stage = stage
        super().__init__(message)

    @property
    def partial(self) -> bool:
        return self.stage == "owner"


def app_exception_to_http(error: AppException) -> HTTPException:
    """
    Convert an application error to an HTTP exception.

    Args:
        error: The application error

    Returns:
        HTTPException with appropriate status code
    """
    if isinstance(error, NotFoundError):
        return not_found_error(error.resource, error.identifier)

    if isinstance(error, AuthError) and error.reason in AUTH_INPUT_REASONS:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(error), "reason": error.reason},
        )

    if isinstance(error, AuthError):
        return authentication_error(str(error) or "Invalid credentials", reason=error.reason)

    if isinstance(error, ValidationError):
        return validation_error(str(error))

    if isinstance(error, GenerationFailed):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": "Failed to generate site. Please try again.", "retry": True},
        )

    if isinstance(error, (SaveFailed, UnpublishFailed)):
        action = "save" if isinstance(error, SaveFailed) else "unpublish"
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "message": f"Failed to {action}. Please retry.",
                "stage": error.stage,
                "partial": error.partial,
                "retry": True,
            },
        )

    # Default to 500 for store and unknown errors
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal error: {error}",
    )


def not_found_error(resource: str, identifier: Optional[str] = None) -> HTTPException:
    """
    Create a standardized 404 error.
    
    Args:
        resource: Name of the resource (e.g., "Site", "Profile")
        identifier: Optional identifier that was not found
        
    Returns:
        HTTPException with 404 status
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def validation_error(message: str) -> HTTPException:
    """
    Create a standardized 400 validation error.
    
    Args:
        message: Validation error message
        
    Returns:
        HTTPException with 400 status
    """
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def authentication_error(message: str = "Invalid credentials", reason: Optional[str] = None) -> HTTPException:
    """
    Create a standardized 401 authentication error.
    
    Args:
        message: Authentication error message
        reason: Provider-reported reason code, if any
        
    Returns:
        HTTPException with 401 status
    """
    detail: Any = message if reason is None else {"message": message, "reason": reason}
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
