"""Error taxonomy shared by the services and routers.

Every error carries the HTTP status it maps to and a short message that is
returned to the client as ``{"message": ...}``.
"""
from __future__ import annotations


class AppError(Exception):
	status_code = 500
	default_message = "Server error"

	def __init__(self, message: str | None = None) -> None:
		self.message = message or self.default_message
		super().__init__(self.message)


class ValidationFailure(AppError):
	status_code = 400
	default_message = "Invalid request"


class NotAuthenticated(AppError):
	status_code = 401
	default_message = "Not authenticated"


class Forbidden(AppError):
	status_code = 403
	default_message = "Forbidden"


class NotFound(AppError):
	status_code = 404
	default_message = "Not found"


class ServerFault(AppError):
	status_code = 500
	default_message = "Server error"
