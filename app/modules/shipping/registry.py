# -*- coding: utf-8 -*-
"""Carrier registry: maps carrier id to its provider.

Built once at startup (see `build_registry`) and passed to handlers.
"""
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from tornado.httpclient import AsyncHTTPClient

from app.environs import env
from app.modules.shipping.carriers.bluedart import BluedartProvider
from app.modules.shipping.carriers.common import Carrier, CarrierProvider, UnknownCarrierError
from app.modules.shipping.carriers.delhivery import DelhiveryProvider
from app.modules.shipping.carriers.fedex import FedexProvider
from app.modules.shipping.carriers.shiprocket import ShiprocketProvider


class CarrierRegistry:
	"""Immutable mapping of carrier id -> provider with a fallback carrier."""

	def __init__(self, providers: Iterable[CarrierProvider], default: str):
		self._providers: Mapping[str, CarrierProvider] = MappingProxyType(
			{provider.name: provider for provider in providers}
		)
		if default not in self._providers:
			raise ValueError(f'Default carrier {default!r} is not registered')
		self._default = default

	@property
	def default(self) -> str:
		return self._default

	@property
	def carriers(self) -> tuple[str, ...]:
		return tuple(sorted(self._providers))

	def resolve(self, carrier_id: Optional[str] = None) -> CarrierProvider:
		"""Get provider by carrier id, default one if id is empty or blank.

		UnknownCarrierError will be raised for unregistered id.
		"""
		key = (carrier_id or '').strip().lower() or self._default
		try:
			return self._providers[key]
		except KeyError:
			raise UnknownCarrierError(carrier_id) from None


def build_registry(
	timeout: float = None,
	http_client: Optional[AsyncHTTPClient] = None
) -> CarrierRegistry:
	"""Registry with all supported carriers configured from app.environs.env."""
	if timeout is None:
		timeout = env.CARRIER_REQUEST_TIMEOUT

	providers = (
		ShiprocketProvider(
			base_url=env.SHIPROCKET_API_BASE,
			email=env.SHIPROCKET_EMAIL,
			password=env.SHIPROCKET_PASSWORD,
			pickup_location=env.SHIPROCKET_PICKUP_LOCATION,
			channel_id=env.SHIPROCKET_CHANNEL_ID,
			timeout=timeout,
			http_client=http_client
		),
		DelhiveryProvider(
			base_url=env.DELHIVERY_API_BASE,
			token=env.DELHIVERY_TOKEN,
			timeout=timeout,
			http_client=http_client
		),
		BluedartProvider(
			api_url=env.BLUEDART_API_URL,
			login_id=env.BLUEDART_LOGIN_ID,
			license_key=env.BLUEDART_LICENSE_KEY,
			timeout=timeout,
			http_client=http_client
		),
		FedexProvider(
			base_url=env.FEDEX_URL,
			api_key=env.FEDEX_TRACKING_API_KEY,
			secret_key=env.FEDEX_TRACKING_SECRET_KEY,
			timeout=timeout,
			http_client=http_client
		),
	)
	# All members of Carrier should be covered.
	assert {provider.carrier for provider in providers} == set(Carrier)

	return CarrierRegistry(providers, default=env.DEFAULT_CARRIER)
