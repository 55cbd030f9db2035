# -*- coding: utf-8 -*-
"""Coupon validation: checks whether coupon can be applied right now.

Checks go in fixed order and the first failed one is reported:
code given -> coupon exists -> active and inside validity window -> usage
limit not reached.
Validation never touches usage counter, it's updated on redemption.
"""
import datetime
from typing import Callable, Optional

from app.modules.coupons.errors import (
	CouponInactiveError,
	CouponNotFoundError,
	MissingCodeError,
	UsageLimitExceededError,
)
from app.modules.coupons.models import Coupon
from app.modules.coupons.store import CouponStore


def utcnow() -> datetime.datetime:
	return datetime.datetime.now(datetime.timezone.utc)


class CouponValidator:
	def __init__(
		self,
		store: CouponStore,
		clock: Callable[[], datetime.datetime] = utcnow
	):
		self._store = store
		self._clock = clock

	async def validate(self, code: Optional[str]) -> Coupon:
		"""Get coupon by code if it can be applied, raise otherwise.

		Returns the stored record as is.
		"""
		if not code:
			raise MissingCodeError()

		coupon = await self._store.find_coupon_by_code(code)
		if coupon is None:
			raise CouponNotFoundError()

		if not coupon.is_within_window(self._clock()):
			raise CouponInactiveError()

		if not coupon.has_remaining_usage():
			raise UsageLimitExceededError()

		return coupon
