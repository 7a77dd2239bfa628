# youtube_optimizer/errors.py
"""Closed set of failures the auth flow can surface to a client.

Each error carries a fixed, user-facing message; raw exception text from
upstream libraries is logged but never placed in a response.
"""
from typing import Optional


class AuthFlowError(Exception):
    status_code = 500
    message = "Authentication failed."

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class ConfigurationError(AuthFlowError):
    status_code = 500
    message = "Google OAuth settings are incomplete. Save a client ID and secret first."


class MissingCodeError(AuthFlowError):
    status_code = 400
    message = "Authorization code is missing."


class InvalidStateError(AuthFlowError):
    status_code = 400
    message = "Authorization state is missing, invalid or expired. Please start again."


class NoChannelError(AuthFlowError):
    status_code = 404
    message = "No YouTube channel was found for this Google account."


class UnauthenticatedError(AuthFlowError):
    status_code = 401
    message = "User is not authenticated."


class UpstreamError(AuthFlowError):
    status_code = 502
    message = "Google API request failed. Please try again later."
