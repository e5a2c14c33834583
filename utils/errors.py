"""HTTP errors raised by the authentication and authorization layer."""

from __future__ import annotations

from werkzeug.exceptions import InternalServerError, Unauthorized


class InvalidCredentials(Unauthorized):
    description = "Invalid credentials"


class AccountInactive(Unauthorized):
    description = "User account is inactive"


class AccountSetupIncomplete(Unauthorized):
    description = "Account setup incomplete. Please contact administrator."


class Unauthenticated(Unauthorized):
    """Single generic answer for every token verification failure."""

    description = "Not authorized to access this route"


class ServerError(InternalServerError):
    description = "Server error"
