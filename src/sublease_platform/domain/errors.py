"""Domain error taxonomy.

Services raise these; the API layer renders them as ``{"error": code,
"detail": message}`` with the class's HTTP status.
"""


class SubleaseError(Exception):
    """Base class for expected, caller-visible failures."""

    code = "error"
    status_code = 400
    default_detail = "Request failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class DomainRejected(SubleaseError):
    code = "domain_rejected"
    status_code = 403
    default_detail = "Only institutional email addresses are allowed"


class DuplicateUser(SubleaseError):
    code = "duplicate_user"
    status_code = 409
    default_detail = "Email already registered"


class WeakPassword(SubleaseError):
    code = "weak_password"
    status_code = 400
    default_detail = "Password is too short"


class InvalidSignup(SubleaseError):
    code = "invalid_signup"
    status_code = 400
    default_detail = "Name is required"


class InvalidCredentials(SubleaseError):
    code = "invalid_credentials"
    status_code = 401
    default_detail = "Invalid email or password"


class Unauthenticated(SubleaseError):
    code = "unauthenticated"
    status_code = 401
    default_detail = "Missing bearer token"


class InvalidCredential(SubleaseError):
    code = "invalid_credential"
    status_code = 401
    default_detail = "Invalid or expired token"


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class NotFound(SubleaseError):
    code = "not_found"
    status_code = 404
    default_detail = "Not found"


class NotOwner(SubleaseError):
    code = "not_owner"
    status_code = 403
    default_detail = "Only the listing owner can change this listing"


class InvalidFilter(SubleaseError):
    code = "invalid_filter"
    status_code = 400
    default_detail = "Invalid filter value"


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------


class EmptyContent(SubleaseError):
    code = "empty_content"
    status_code = 400
    default_detail = "Message content cannot be empty"


class NotAParticipant(SubleaseError):
    code = "not_a_participant"
    status_code = 403
    default_detail = "You are not a participant in this conversation"


class SelfConversation(SubleaseError):
    code = "self_conversation"
    status_code = 400
    default_detail = "Cannot start a conversation with yourself"
