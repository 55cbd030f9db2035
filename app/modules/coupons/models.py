# -*- coding: utf-8 -*-
"""Coupon record as it's kept in the store.
"""
import dataclasses
import datetime
from typing import Optional


def as_utc(value: datetime.datetime) -> datetime.datetime:
	"""Naive datetimes are treated as UTC."""
	if value.tzinfo is None:
		return value.replace(tzinfo=datetime.timezone.utc)
	return value


@dataclasses.dataclass(frozen=True)
class Coupon:
	code: str
	valid_from: datetime.datetime
	valid_to: datetime.datetime
	is_active: bool = True
	usage_count: int = 0
	# None means unlimited.
	usage_limit: Optional[int] = None
	id: Optional[str] = None
	# 'percentage', 'fixed' or 'free_shipping'.
	type: str = 'percentage'
	value: float = 0
	min_amount: Optional[float] = None
	max_discount: Optional[float] = None

	def is_within_window(self, now: datetime.datetime) -> bool:
		"""Active flag is set and `now` is inside [valid_from, valid_to].

		Naive datetimes (both `now` and bounds) are compared as UTC.
		"""
		if not self.is_active:
			return False
		return as_utc(self.valid_from) <= as_utc(now) <= as_utc(self.valid_to)

	def has_remaining_usage(self) -> bool:
		return self.usage_limit is None or self.usage_count < self.usage_limit
