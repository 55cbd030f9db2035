# -*- coding: utf-8 -*-
"""Handles Delhivery tracking API (packages JSON API).

Authorization is a static token passed as `Authorization: Token <token>`.
Unknown waybill is reported with empty `ShipmentData` and 'Error' message.
"""
from typing import Optional
import urllib.parse

from tornado.httpclient import AsyncHTTPClient
import voluptuous as vlps

from app.modules.shipping.carriers.common import (
	Carrier,
	CarrierProvider,
	CarrierResponseError,
	TrackingDetails,
	TrackingEvent,
	TrackingNotFoundError,
	chronological,
	parse_timestamp,
)


_SCAN_SCHEMA = vlps.Schema({
	vlps.Required('ScanDetail'): vlps.Schema({
		vlps.Optional('Scan', default=''): vlps.Any(str, None),
		vlps.Optional('Instructions'): vlps.Any(str, None),
		vlps.Optional('ScanDateTime'): vlps.Any(str, None),
		vlps.Optional('ScannedLocation'): vlps.Any(str, None),
	}, extra=vlps.REMOVE_EXTRA),
}, extra=vlps.REMOVE_EXTRA)

_SHIPMENT_SCHEMA = vlps.Schema({
	vlps.Required('Shipment'): vlps.Schema({
		vlps.Optional('Status', default=dict): vlps.Schema({
			vlps.Optional('Status'): vlps.Any(str, None),
		}, extra=vlps.REMOVE_EXTRA),
		vlps.Optional('Scans', default=list): vlps.Any(None, [_SCAN_SCHEMA]),
		vlps.Optional('ExpectedDeliveryDate'): vlps.Any(str, None),
		vlps.Optional('PromisedDeliveryDate'): vlps.Any(str, None),
	}, extra=vlps.REMOVE_EXTRA),
}, extra=vlps.REMOVE_EXTRA)

_RESPONSE_SCHEMA = vlps.Schema({
	vlps.Optional('ShipmentData', default=list): vlps.Any(None, [_SHIPMENT_SCHEMA]),
	vlps.Optional('Error'): vlps.Any(str, None),
}, extra=vlps.REMOVE_EXTRA)


class DelhiveryProvider(CarrierProvider):
	carrier = Carrier.DELHIVERY
	tracking_url_template = 'https://www.delhivery.com/track/{tracking_number}'

	def __init__(
		self,
		*,
		base_url: str,
		token: Optional[str],
		timeout: float,
		http_client: Optional[AsyncHTTPClient] = None
	):
		super().__init__(timeout=timeout, http_client=http_client)
		self.base_url = base_url
		self._token = token

	async def track(self, tracking_number: str) -> TrackingDetails:
		if not self._token:
			raise CarrierResponseError('Delhivery token is not configured')

		query = urllib.parse.urlencode({'waybill': tracking_number})
		request = self.make_request(
			f'{self.base_url}/api/v1/packages/json/?{query}',
			method='GET',
			headers={
				'Accept': 'application/json',
				'Authorization': f'Token {self._token}'
			}
		)
		response = await self.fetch(request, tracking_number)

		try:
			response_data = _RESPONSE_SCHEMA(self.parse_json(response))
		except vlps.Error as e:
			raise CarrierResponseError(f'Invalid response from Delhivery: {e}') from e

		shipments = response_data['ShipmentData'] or []
		if not shipments:
			raise TrackingNotFoundError(f'Delhivery: {tracking_number} not found')

		return self._normalize(tracking_number, shipments[0]['Shipment'])

	def _normalize(self, tracking_number: str, shipment: dict) -> TrackingDetails:
		scans = [scan['ScanDetail'] for scan in shipment['Scans'] or []]
		events = chronological(
			TrackingEvent(
				timestamp=parse_timestamp(scan.get('ScanDateTime')),
				status=scan.get('Instructions') or scan['Scan'] or '',
				location=scan.get('ScannedLocation') or None
			)
			for scan in scans
		)

		estimated = shipment.get('ExpectedDeliveryDate') or shipment.get('PromisedDeliveryDate')

		return TrackingDetails(
			carrier=self.carrier,
			tracking_number=tracking_number,
			status=shipment['Status'].get('Status') or 'unknown',
			events=events,
			estimated_delivery=parse_timestamp(estimated)
		)
