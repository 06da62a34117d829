"""Error types raised by the shortcode registry.

Each error carries the HTTP status and the machine-readable code the
transport layer reports, so a single exception handler can translate
any of them into a response.
"""


class RegistryError(Exception):
    """Base class for all registry failures."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(RegistryError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class InvalidShortcode(InvalidRequest):
    error_code = "INVALID_SHORTCODE"
    default_message = "Shortcode must contain only letters and numbers"


class InvalidValidity(InvalidRequest):
    error_code = "INVALID_VALIDITY"
    default_message = "Validity must be a positive number of minutes"


class ShortcodeConflict(RegistryError):
    status_code = 409
    error_code = "SHORTCODE_CONFLICT"
    default_message = "Shortcode already exists"


class GenerationExhausted(RegistryError):
    """No free shortcode was found within the attempt bound."""

    status_code = 409
    error_code = "GENERATION_EXHAUSTED"
    default_message = "Unable to generate unique shortcode"


class ShortcodeNotFound(RegistryError):
    status_code = 404
    error_code = "SHORTCODE_NOT_FOUND"
    default_message = "Shortcode not found"


class ShortcodeExpired(RegistryError):
    status_code = 410
    error_code = "SHORTCODE_EXPIRED"
    default_message = "Shortened URL has expired"
