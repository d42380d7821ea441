# ===============================================================
# errors.py: storefront error taxonomy
# ===============================================================


class ShopError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code = 400
    retryable = False
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "error": type(self).__name__,
            "retryable": self.retryable,
        }


class NotFound(ShopError):
    """User, product, prize or coupon missing."""

    status_code = 404
    default_message = "Not found"


class InsufficientBalance(ShopError):
    """No spins left on the user's balance."""

    default_message = "No spins remaining. Please purchase more spins."


class InvalidConfiguration(ShopError):
    """The shop is configured in a way that prevents the request."""

    default_message = "Invalid configuration"


class NoPrizesConfigured(InvalidConfiguration):
    default_message = "No prizes available"


class SelectionFailed(InvalidConfiguration):
    default_message = "Failed to select prize"


class Unauthorized(ShopError):
    """Missing or invalid credentials."""

    status_code = 401
    default_message = "Unauthorized"


class Forbidden(Unauthorized):
    """Authenticated, but not allowed to touch this resource."""

    status_code = 403
    default_message = "Forbidden"


class AlreadyRedeemed(ShopError):
    default_message = "Coupon already redeemed"


class Expired(ShopError):
    default_message = "Coupon expired"


class Conflict(ShopError):
    """Concurrent update lost the race; the whole request may be retried."""

    status_code = 409
    retryable = True
    default_message = "Concurrent update detected, please retry"
