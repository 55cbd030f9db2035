# -*- coding: utf-8 -*-
"""Handles FedEx tracking API (REST, track v1).

Mock tracking numbers:
https://www.fedex.com/en-us/developer/web-services/process.html#develop
Apparently, there is no possibility to test non-existent numbers on REST
sandbox, because their virtualized response always corresponds to existing
number.
"""
import json
from typing import Optional

from tornado.httpclient import AsyncHTTPClient
import voluptuous as vlps

from app.carriers_auth import fedex as fedex_auth
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



_TRACK_ENDPOINT = '/track/v1/trackingnumbers'

# Error code of a track result for unknown tracking number.
_NOT_FOUND_CODES = frozenset({
	'TRACKING.TRACKINGNUMBER.NOTFOUND',
	'TRACKING.TRACKINGNUMBER.INVALID',
})

# Describe only keys we are using.
_SCAN_EVENT_SCHEMA = vlps.Schema({
	vlps.Optional('date'): vlps.Any(str, None),
	vlps.Optional('eventDescription', default=''): vlps.Any(str, None),
	vlps.Optional('scanLocation', default=None): vlps.Any(None, vlps.Schema({
		vlps.Optional('city'): vlps.Any(str, None),
		vlps.Optional('stateOrProvinceCode'): vlps.Any(str, None),
		vlps.Optional('countryCode'): vlps.Any(str, None),
	}, extra=vlps.REMOVE_EXTRA)),
}, extra=vlps.REMOVE_EXTRA)

_TRACK_RESULT_SCHEMA = vlps.Schema({
	vlps.Optional('error'): {
		vlps.Required('code'): str,
		vlps.Optional('message'): str,
	},
	vlps.Optional('latestStatusDetail', default=None): vlps.Any(None, vlps.Schema({
		vlps.Optional('description'): vlps.Any(str, None),
		vlps.Optional('statusByLocale'): vlps.Any(str, None),
	}, extra=vlps.REMOVE_EXTRA)),
	vlps.Optional('scanEvents', default=list): [_SCAN_EVENT_SCHEMA],
	vlps.Optional('dateAndTimes', default=list): [vlps.Schema({
		vlps.Required('type'): str,
		vlps.Optional('dateTime'): vlps.Any(str, None),
	}, extra=vlps.REMOVE_EXTRA)],
}, extra=vlps.REMOVE_EXTRA)

_RESPONSE_SCHEMA = vlps.Schema({
	vlps.Required('output'): {
		vlps.Required('completeTrackResults'): vlps.All([{
			vlps.Required('trackResults'): vlps.All(
				[_TRACK_RESULT_SCHEMA],
				vlps.Length(min=1)
			),
		}], vlps.Length(min=1)),
	},
}, extra=vlps.REMOVE_EXTRA)


def _format_location(location: Optional[dict]) -> Optional[str]:
	if not location:
		return None
	parts = [
		location.get(key)
		for key in ('city', 'stateOrProvinceCode', 'countryCode')
	]
	return ', '.join(part for part in parts if part) or None


class FedexProvider(CarrierProvider):
	carrier = Carrier.FEDEX
	tracking_url_template = 'https://www.fedex.com/fedextrack/?trknbr={tracking_number}'

	def __init__(
		self,
		*,
		base_url: str,
		api_key: Optional[str],
		secret_key: Optional[str],
		timeout: float,
		http_client: Optional[AsyncHTTPClient] = None
	):
		auth = fedex_auth.make_token_cache(
			base_url=base_url,
			api_key=api_key,
			secret_key=secret_key,
			timeout=timeout
		)
		super().__init__(timeout=timeout, http_client=http_client, auth=auth)
		self.base_url = base_url

	async def track(self, tracking_number: str) -> TrackingDetails:
		body = json.dumps({
				"trackingInfo": [
					{"trackingNumberInfo": {"trackingNumber": tracking_number}}
				],
				"includeDetailedScans": True
			},
			separators=(',', ':')
		)
		request = self.make_request(
			self.base_url + _TRACK_ENDPOINT,
			method='POST',
			headers={'Content-Type': 'application/json'},
			body=body
		)
		response = await self.fetch(request, tracking_number)

		try:
			response_data = _RESPONSE_SCHEMA(self.parse_json(response))
		except vlps.Error as e:
			raise CarrierResponseError(f'Invalid response from FedEx: {e}') from e

		# We asked for exactly one tracking number.
		track_result = response_data['output']['completeTrackResults'][0]['trackResults'][0]

		return self._normalize(tracking_number, track_result)

	def _normalize(self, tracking_number: str, track_result: dict) -> TrackingDetails:
		error = track_result.get('error')
		if error is not None:
			if error['code'] in _NOT_FOUND_CODES:
				raise TrackingNotFoundError(f'FedEx: {tracking_number} not found')
			raise CarrierResponseError(f'FedEx track error: {error["code"]}')

		latest = track_result['latestStatusDetail'] or {}
		status = latest.get('description') or latest.get('statusByLocale') or 'unknown'

		events = chronological(
			TrackingEvent(
				timestamp=parse_timestamp(event.get('date')),
				status=event['eventDescription'] or '',
				location=_format_location(event['scanLocation'])
			)
			for event in track_result['scanEvents']
		)

		estimated_delivery = None
		for date_and_time in track_result['dateAndTimes']:
			if date_and_time['type'] == 'ESTIMATED_DELIVERY':
				estimated_delivery = parse_timestamp(date_and_time.get('dateTime'))
				break

		return TrackingDetails(
			carrier=self.carrier,
			tracking_number=tracking_number,
			status=status,
			events=events,
			estimated_delivery=estimated_delivery
		)
