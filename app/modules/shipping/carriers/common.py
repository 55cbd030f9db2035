# -*- coding: utf-8 -*-
"""Common part for all carriers: normalized tracking data, shipment orders,
errors and CarrierProvider base class.
"""
import abc
import asyncio
import dataclasses
import datetime
import enum
import json
import logging
from typing import Iterable, Optional
import urllib.parse

from tornado.httpclient import AsyncHTTPClient, HTTPClientError, HTTPRequest, HTTPResponse

from app.carriers_auth.common import BearerTokenCache, CarrierAuthError
from app.modules.errors import BusinessRuleError, NotFoundError, ServiceError


logger = logging.getLogger(__name__)



class Carrier(str, enum.Enum):
	SHIPROCKET = 'shiprocket'
	DELHIVERY = 'delhivery'
	BLUEDART = 'bluedart'
	FEDEX = 'fedex'


class CarrierTrackingError(ServiceError):
	"""Base class for all carrier tracking errors."""
	default_message = 'Failed to get tracking info'


class CarrierUnavailableError(CarrierTrackingError):
	"""Carrier API is unreachable, timed out or failed on its side.

	Transient: it makes sense to retry later.
	"""
	default_message = 'Carrier is temporarily unavailable'


class CarrierResponseError(CarrierTrackingError):
	"""Carrier API answered, but we can't make sense of the answer.

	Also used when carrier rejects our credentials or they are not configured.
	"""
	default_message = 'Invalid response from carrier'


class TrackingNotFoundError(CarrierTrackingError, NotFoundError):
	"""Carrier knows nothing about the shipment."""
	default_message = 'Shipment not found'


class UnknownCarrierError(CarrierTrackingError):
	default_message = 'Unknown carrier'

	def __init__(self, carrier_id: str):
		self.carrier_id = carrier_id
		super().__init__(f'Unknown carrier: {carrier_id!r}')


@dataclasses.dataclass(frozen=True)
class TrackingEvent:
	timestamp: Optional[datetime.datetime]
	status: str
	location: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class TrackingDetails:
	carrier: Carrier
	tracking_number: str
	status: str
	events: tuple[TrackingEvent, ...] = ()
	estimated_delivery: Optional[datetime.datetime] = None


class UnsupportedOperationError(BusinessRuleError):
	"""Carrier has no API for requested operation."""
	default_message = 'Operation is not supported by this carrier'


@dataclasses.dataclass(frozen=True)
class ShippingAddress:
	first_name: str
	last_name: str
	address1: str
	city: str
	state: str
	zip_code: str
	country: str
	address2: Optional[str] = None
	phone: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class OrderItem:
	name: str
	quantity: int
	# Unit price in base currency.
	price: float
	sku: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class Dimensions:
	length: float
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class LabelRequest:
	"""Order which should be shipped."""
	order_id: str
	items: tuple[OrderItem, ...]
	shipping_address: ShippingAddress
	order_number: Optional[str] = None
	weight_kg: Optional[float] = None
	dimensions_cm: Optional[Dimensions] = None
	# Cash on delivery amount, 0 or None for prepaid orders.
	collect_amount: Optional[float] = None


@dataclasses.dataclass(frozen=True)
class LabelResult:
	carrier: Carrier
	tracking_number: str
	tracking_url: str
	awb: Optional[str] = None
	shipment_id: Optional[str] = None
	label_url: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class PickupRequest:
	shipment_id: Optional[str] = None
	awb: Optional[str] = None
	# YYYY-MM-DD
	pickup_date: Optional[str] = None
	address: Optional[ShippingAddress] = None


@dataclasses.dataclass(frozen=True)
class PickupResult:
	pickup_scheduled: bool
	pickup_id: Optional[str] = None
	pickup_date: Optional[str] = None
	message: Optional[str] = None


def _event_sort_key(event: TrackingEvent):
	# Undated events go last. Naive timestamps are treated as UTC just to make
	# them comparable with aware ones.
	timestamp = event.timestamp
	if timestamp is None:
		return (1, datetime.datetime.min.replace(tzinfo=datetime.timezone.utc))
	if timestamp.tzinfo is None:
		timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
	return (0, timestamp)


def chronological(events: Iterable[TrackingEvent]) -> tuple[TrackingEvent, ...]:
	"""Oldest event first. Stable for events with equal timestamps."""
	return tuple(sorted(events, key=_event_sort_key))


def parse_timestamp(value: Optional[str], *formats: str) -> Optional[datetime.datetime]:
	"""Parse carrier timestamp: ISO 8601 or one of `formats`.

	Returns None for empty or unrecognized values: a bad date in one scan
	shouldn't make the whole tracking response unusable.
	"""
	if not value:
		return None
	value = value.strip()
	try:
		return datetime.datetime.fromisoformat(value)
	except ValueError:
		pass
	for format_ in formats:
		try:
			return datetime.datetime.strptime(value, format_)
		except ValueError:
			continue

	logger.debug('Unrecognized carrier timestamp: %r', value)
	return None


class CarrierProvider(abc.ABC):
	"""Interface of a single carrier.

	Subclasses define `carrier`, `tracking_url_template` (with
	`{tracking_number}` placeholder) and implement `track`. Label and pickup
	operations are optional.
	Instances don't keep any state except (optionally) cached auth token.
	"""
	carrier: Carrier
	tracking_url_template: str
	# HTTP codes meaning 'no such shipment' for this carrier's API.
	not_found_codes: tuple[int, ...] = (404,)

	def __init__(
		self,
		*,
		timeout: float,
		http_client: Optional[AsyncHTTPClient] = None,
		auth: Optional[BearerTokenCache] = None
	):
		if timeout <= 0:
			raise ValueError('timeout should be positive')
		self.timeout = timeout
		self._http_client = http_client
		self._auth = auth

	@property
	def name(self) -> str:
		return self.carrier.value

	@property
	def http_client(self) -> AsyncHTTPClient:
		# Tornado keeps one shared client per IOLoop, so it's cheap.
		if self._http_client is not None:
			return self._http_client
		return AsyncHTTPClient()

	def get_tracking_url(self, tracking_number: str) -> str:
		"""Public tracking page URL. Pure, no I/O."""
		return self.tracking_url_template.format(
			tracking_number=urllib.parse.quote(tracking_number, safe='')
		)

	@abc.abstractmethod
	async def track(self, tracking_number: str) -> TrackingDetails:
		"""Get normalized tracking details from carrier API.

		Raises CarrierUnavailableError, TrackingNotFoundError or
		CarrierResponseError.
		"""

	async def generate_label(self, order: LabelRequest) -> LabelResult:
		"""Register shipment for `order` with carrier and get its label.

		Carriers without label API raise UnsupportedOperationError.
		"""
		raise UnsupportedOperationError(f'{self.name} does not support label generation')

	async def schedule_pickup(self, pickup: PickupRequest) -> PickupResult:
		"""Ask carrier to pick up already registered shipment.

		Carriers without pickup API raise UnsupportedOperationError.
		"""
		raise UnsupportedOperationError(f'{self.name} does not support pickup scheduling')

	def make_request(self, url: str, **kwargs) -> HTTPRequest:
		"""HTTPRequest with carrier timeouts applied."""
		return HTTPRequest(
			url=url,
			connect_timeout=self.timeout,
			request_timeout=self.timeout,
			**kwargs
		)

	async def _send(self, request: HTTPRequest) -> HTTPResponse:
		"""Low-level fetch. Doesn't wrap any errors."""
		return await self.http_client.fetch(request)

	async def _authorized_send(self, request: HTTPRequest) -> HTTPResponse:
		if self._auth is not None:
			return await self._auth.fetch(self._send, request)
		return await self._send(request)

	async def fetch(
		self,
		request: HTTPRequest,
		reference: str,
		not_found_codes: Optional[tuple[int, ...]] = None
	) -> HTTPResponse:
		"""Makes request to carrier API.

		`reference` - tracking number or order id, used in errors and logs.
		`not_found_codes` - overrides `self.not_found_codes`.

		Injects bearer token if provider has auth configured. Token fetch,
		the request itself and its retry after token refresh all share one
		deadline of `self.timeout` seconds.
		All transport and HTTP errors are converted to CarrierTrackingError
		subclasses.
		"""
		if not_found_codes is None:
			not_found_codes = self.not_found_codes

		try:
			return await asyncio.wait_for(self._authorized_send(request), timeout=self.timeout)
		except CarrierAuthError as e:
			raise CarrierResponseError(f'{self.name}: auth failed: {e}') from e
		except asyncio.TimeoutError as e:
			logger.warning(
				'%s: no response in %ss for %s', self.name, self.timeout, reference
			)
			raise CarrierUnavailableError(
				f'{self.name}: no response in {self.timeout}s'
			) from e
		except HTTPClientError as e:
			if e.code in not_found_codes:
				raise TrackingNotFoundError(
					f'{self.name}: {reference} not found'
				) from e
			# 599 is used by tornado for timeouts and connection errors.
			if e.code >= 500 or e.code == 429:
				logger.warning('%s: HTTP %s for %s', self.name, e.code, reference)
				raise CarrierUnavailableError(f'{self.name}: HTTP {e.code}') from e
			raise CarrierResponseError(f'{self.name}: unexpected HTTP {e.code}') from e
		except OSError as e:
			logger.warning('%s: connection failed: %s', self.name, e)
			raise CarrierUnavailableError(f'{self.name}: connection failed') from e

	def parse_json(self, response: HTTPResponse):
		try:
			return json.loads(response.body.decode())
		except (UnicodeDecodeError, ValueError) as e:
			raise CarrierResponseError(f'{self.name}: response is not JSON') from e
