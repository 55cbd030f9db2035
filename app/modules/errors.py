# -*- coding: utf-8 -*-
"""Base classes for all errors raised by app.modules.

Every error here carries a message that is safe to show to API clients unless
stated otherwise. Concrete errors live next to the code raising them.
"""


class ServiceError(Exception):
	"""Base class for all domain errors."""
	default_message = 'Something went wrong'

	def __init__(self, message: str = None):
		self.message = message or self.default_message
		super().__init__(self.message)


class ValidationError(ServiceError):
	"""Caller input is malformed."""
	default_message = 'Invalid request'


class NotFoundError(ServiceError):
	"""Caller's reference doesn't exist."""
	default_message = 'Not found'


class BusinessRuleError(ServiceError):
	"""Entity exists, but some business rule rejects the request."""
	default_message = 'Request rejected'
