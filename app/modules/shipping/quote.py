# -*- coding: utf-8 -*-
"""Simple region-based shipping quote.

Zone is defined by the first 3 digits of Indian pincode. Amounts are in INR.
"""
import dataclasses
import re

# Mumbai, Bengaluru, Delhi, Chennai.
METRO_PREFIXES = frozenset({'400', '560', '110', '600'})
_URBAN_PREFIX_RE = re.compile(r'^[1-9][0-9]{2}$')

PINCODE_RE = re.compile(r'^[0-9]{6}$')

_BASE_AMOUNTS = {'metro': 99, 'urban': 149, 'remote': 249}

# Unknown delivery options are charged as standard.
_SURCHARGES = {'standard': 0, 'express': 200, 'premium': 900}

DEFAULT_DELIVERY_ID = 'standard'


@dataclasses.dataclass(frozen=True)
class ShippingQuote:
	amount: int
	eta_days: int
	zone: str


def get_zone(pincode: str) -> str:
	prefix = pincode[:3]
	if prefix in METRO_PREFIXES:
		return 'metro'
	if _URBAN_PREFIX_RE.match(prefix):
		return 'urban'
	return 'remote'


def get_eta_days(delivery_id: str, zone: str) -> int:
	if zone == 'remote':
		base = 7
	elif zone == 'urban':
		base = 5
	else:
		base = 4

	if delivery_id == 'express':
		return max(2, base - 2)
	if delivery_id == 'premium':
		return max(2, base - 1)
	return base


def get_quote(pincode: str, delivery_id: str = DEFAULT_DELIVERY_ID) -> ShippingQuote:
	"""Quote for delivery to `pincode`. Pincode is expected to be validated."""
	zone = get_zone(pincode)
	amount = _BASE_AMOUNTS[zone] + _SURCHARGES.get(delivery_id, 0)
	return ShippingQuote(
		amount=amount,
		eta_days=get_eta_days(delivery_id, zone),
		zone=zone
	)
