# -*- coding: utf-8 -*-
"""Single place where domain errors are turned into HTTP responses.

BaseHandler consults ERROR_RESPONSES both for the response and for logging,
so handlers should simply let domain errors propagate.
"""
import logging
from typing import NamedTuple, Optional

from app.modules.coupons.errors import (
	CouponInactiveError,
	CouponNotFoundError,
	UsageLimitExceededError,
)
from app.modules.errors import ServiceError, ValidationError
from app.modules.shipping.carriers.common import (
	CarrierResponseError,
	CarrierUnavailableError,
	TrackingNotFoundError,
	UnknownCarrierError,
	UnsupportedOperationError,
)


class ErrorResponse(NamedTuple):
	status_code: int
	# Message for client. None: use error's own message (it's safe).
	message: Optional[str]
	# None: nothing to tell operators about.
	log_level: Optional[int]
	retryable: bool = False


# Retry-After value (seconds) for retryable errors.
RETRY_AFTER = 30

# Order matters: the first matching class wins.
ERROR_RESPONSES: tuple[tuple[type, ErrorResponse], ...] = (
	(ValidationError, ErrorResponse(400, None, None)),
	(UnknownCarrierError, ErrorResponse(400, 'Unsupported carrier', logging.ERROR)),
	(TrackingNotFoundError, ErrorResponse(404, 'Shipment not found', logging.INFO)),
	(CouponNotFoundError, ErrorResponse(404, None, None)),
	(CouponInactiveError, ErrorResponse(400, None, None)),
	(UsageLimitExceededError, ErrorResponse(400, None, None)),
	(UnsupportedOperationError, ErrorResponse(400, None, None)),
	(
		CarrierUnavailableError,
		ErrorResponse(
			503,
			'Carrier is temporarily unavailable, please retry later',
			logging.WARNING,
			retryable=True
		)
	),
	(CarrierResponseError, ErrorResponse(502, 'Carrier request failed', logging.ERROR)),
	(ServiceError, ErrorResponse(500, 'Something went wrong', logging.ERROR)),
)

UNEXPECTED_ERROR = ErrorResponse(500, 'Something went wrong', logging.ERROR)


def get_error_response(error: BaseException) -> ErrorResponse:
	for error_class, response in ERROR_RESPONSES:
		if isinstance(error, error_class):
			return response
	return UNEXPECTED_ERROR


def get_client_message(error: BaseException, response: ErrorResponse) -> str:
	if response.message is not None:
		return response.message
	return getattr(error, 'message', None) or UNEXPECTED_ERROR.message
