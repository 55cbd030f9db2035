# -*- coding: utf-8 -*-
"""Read-only coupon stores.

Real persistence is someone else's job: this module only defines what
validator needs from it and provides two simple implementations.
"""
import datetime
import json
import logging
from typing import Iterable, Optional, Protocol

import voluptuous as vlps

from app.modules.coupons.models import Coupon, as_utc


logger = logging.getLogger(__name__)


class CouponStore(Protocol):
	async def find_coupon_by_code(self, code: str) -> Optional[Coupon]:
		pass


class MemoryCouponStore:
	"""Keeps coupons in dict by code. Implements CouponStore."""

	def __init__(self, coupons: Iterable[Coupon] = ()):
		self._coupons = {}
		for coupon in coupons:
			if coupon.code in self._coupons:
				raise ValueError(f'Duplicate coupon code: {coupon.code!r}')
			self._coupons[coupon.code] = coupon

	def __len__(self):
		return len(self._coupons)

	async def find_coupon_by_code(self, code: str) -> Optional[Coupon]:
		return self._coupons.get(code)


def _to_datetime(value: str) -> datetime.datetime:
	"""ISO 8601 string to aware datetime. Naive values are treated as UTC.

	ValueError is turned into voluptuous.Invalid by schema.
	"""
	return as_utc(datetime.datetime.fromisoformat(value))


_DATETIME = vlps.All(str, _to_datetime, msg='expected ISO 8601 datetime')
_NON_NEGATIVE_NUMBER = vlps.All(vlps.Any(int, float), vlps.Range(min=0))

# One record of coupons file. Keys are the same as in API responses.
COUPON_RECORD_SCHEMA = vlps.Schema({
	vlps.Required('code'): vlps.All(str, vlps.Length(min=1)),
	vlps.Required('validFrom'): _DATETIME,
	vlps.Required('validTo'): _DATETIME,
	vlps.Optional('isActive', default=True): bool,
	vlps.Optional('usageCount', default=0): vlps.All(int, vlps.Range(min=0)),
	vlps.Optional('usageLimit', default=None): vlps.Any(None, vlps.All(int, vlps.Range(min=1))),
	vlps.Optional('id', default=None): vlps.Any(None, str),
	vlps.Optional('type', default='percentage'): vlps.In(('percentage', 'fixed', 'free_shipping')),
	vlps.Optional('value', default=0): _NON_NEGATIVE_NUMBER,
	vlps.Optional('minAmount', default=None): vlps.Any(None, _NON_NEGATIVE_NUMBER),
	vlps.Optional('maxDiscount', default=None): vlps.Any(None, _NON_NEGATIVE_NUMBER),
}, extra=vlps.REMOVE_EXTRA)


def coupon_from_record(record: dict) -> Coupon:
	"""Validate raw record and build Coupon. Raises voluptuous.Invalid."""
	data = COUPON_RECORD_SCHEMA(record)
	return Coupon(
		code=data['code'],
		valid_from=data['validFrom'],
		valid_to=data['validTo'],
		is_active=data['isActive'],
		usage_count=data['usageCount'],
		usage_limit=data['usageLimit'],
		id=data['id'],
		type=data['type'],
		value=data['value'],
		min_amount=data['minAmount'],
		max_discount=data['maxDiscount']
	)


def load_coupon_file(path: str) -> MemoryCouponStore:
	"""Read JSON list of coupon records once. Should be used at startup.

	Any invalid record makes the whole file invalid: ValueError is raised.
	"""
	with open(path, encoding='utf-8') as file:
		records = json.load(file)

	if not isinstance(records, list):
		raise ValueError(f'{path}: expected list of coupons')

	coupons = []
	for index, record in enumerate(records):
		try:
			coupons.append(coupon_from_record(record))
		except vlps.Invalid as e:
			raise ValueError(f'{path}: coupon #{index}: {e}') from e

	store = MemoryCouponStore(coupons)
	logger.info('Loaded %d coupons from %s', len(store), path)

	return store
