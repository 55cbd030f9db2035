# -*- coding: utf-8 -*-
"""Low-level module for tracking info.
"""
from typing import Optional, TypedDict

from app.modules.errors import ValidationError
from app.modules.shipping.carriers.common import TrackingDetails
from app.modules.shipping.registry import CarrierRegistry

# It looks like it should be no more than 34, but just in case...
# For input validation:
TRACKING_NUMBER_MAX_LENGTH = 128


class TrackingResult(TypedDict):
	trackingUrl: str
	details: TrackingDetails


async def get_tracking_info(
	registry: CarrierRegistry,
	tracking_number: Optional[str],
	provider: Optional[str] = None
) -> TrackingResult:
	"""Get tracking info by tracking number from the given carrier.

	`provider` - carrier id, registry's default carrier if empty.

	ValidationError is raised for empty tracking number before carrier is even
	resolved. Errors of registry and carrier are propagated.
	"""
	if not tracking_number:
		raise ValidationError('trackingNumber is required')

	carrier = registry.resolve(provider)
	tracking_url = carrier.get_tracking_url(tracking_number)
	details = await carrier.track(tracking_number)

	return {'trackingUrl': tracking_url, 'details': details}
