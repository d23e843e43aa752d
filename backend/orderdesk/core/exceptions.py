"""
Errors returned to API clients.

Services, the order wizard and the authorization decorators raise these;
``orderdesk.core.middleware`` turns them into JSON bodies of the form
``{"error": <code>, "message": <text>}`` with the matching HTTP status.
Each class carries its status, code and a default message, so most
callers raise them without arguments.
"""

from typing import Optional


class APIError(Exception):
    """
    Root of the API error tree.

    Attributes:
        message: Text shown to the user
        status_code: HTTP status of the response
        error_code: Stable identifier clients can branch on
    """
    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.error_code, "message": self.message}


# 400

class ValidationError(APIError):
    """Input was rejected; ``errors`` maps each field to its messages."""
    status_code = 400
    error_code = "validation_error"
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[dict] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class BadRequestError(APIError):
    status_code = 400
    error_code = "bad_request"
    default_message = "The request cannot be processed"


class WizardStepError(BadRequestError):
    """The wizard is not at the step this operation belongs to."""
    error_code = "invalid_wizard_step"
    default_message = "Not available at the current step of the order wizard"


# 401

class UnauthorizedError(APIError):
    status_code = 401
    error_code = "unauthorized"
    default_message = "Sign in to continue"


class InvalidCredentialsError(UnauthorizedError):
    error_code = "invalid_credentials"
    default_message = "Wrong email or password"


class TokenExpiredError(UnauthorizedError):
    error_code = "token_expired"
    default_message = "Session expired, sign in again"


class InvalidTokenError(UnauthorizedError):
    error_code = "invalid_token"
    default_message = "Access token is not valid"


# 403

class ForbiddenError(APIError):
    status_code = 403
    error_code = "forbidden"
    default_message = "Not allowed"


class StoreAccessDeniedError(ForbiddenError):
    """The user has no link to the store named in X-Store-Slug."""
    error_code = "store_access_denied"
    default_message = "You are not a member of this store"


class InsufficientPermissionsError(ForbiddenError):
    """The role held in the current store lacks the module action."""
    error_code = "insufficient_permissions"
    default_message = "Your role does not allow this"

    def __init__(self, message: Optional[str] = None, required_permission: Optional[str] = None):
        if required_permission and not message:
            message = f"Your role lacks the {required_permission} permission"
        super().__init__(message)
        self.required_permission = required_permission


class PlatformAdminRequiredError(ForbiddenError):
    error_code = "platform_admin_required"
    default_message = "Only platform administrators can do this"


class UserInactiveError(ForbiddenError):
    error_code = "user_inactive"
    default_message = "This account has been deactivated"


# 404

class NotFoundError(APIError):
    status_code = 404
    error_code = "not_found"
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    error_code = "user_not_found"
    default_message = "User not found"


class StoreNotFoundError(NotFoundError):
    error_code = "store_not_found"
    default_message = "Store not found"


class RoleNotFoundError(NotFoundError):
    error_code = "role_not_found"
    default_message = "Role not found"


class CustomerNotFoundError(NotFoundError):
    error_code = "customer_not_found"
    default_message = "Customer not found"


class AddressNotFoundError(NotFoundError):
    error_code = "address_not_found"
    default_message = "Address not found"


class ProductNotFoundError(NotFoundError):
    error_code = "product_not_found"
    default_message = "Product not found"


class CategoryNotFoundError(NotFoundError):
    error_code = "category_not_found"
    default_message = "Category not found"


class ComplementGroupNotFoundError(NotFoundError):
    error_code = "complement_group_not_found"
    default_message = "Complement group not found"


class TagNotFoundError(NotFoundError):
    error_code = "tag_not_found"
    default_message = "Tag not found"


class OrderNotFoundError(NotFoundError):
    error_code = "order_not_found"
    default_message = "Order not found"


class WizardNotStartedError(NotFoundError):
    error_code = "wizard_not_started"
    default_message = "No order is being taken; start the wizard first"


# 405

class RoleMutationNotSupportedError(APIError):
    """Roles are a fixed set: only their names and permissions are editable."""
    status_code = 405
    error_code = "role_mutation_not_supported"
    default_message = "Creating or deleting roles is not supported. Edit the existing roles instead."


# 409

class ConflictError(APIError):
    status_code = 409
    error_code = "conflict"
    default_message = "Conflicts with existing data"


class DuplicateResourceError(ConflictError):
    error_code = "duplicate_resource"
    default_message = "Already exists"
