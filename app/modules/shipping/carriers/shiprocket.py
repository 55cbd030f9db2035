# -*- coding: utf-8 -*-
"""Handles Shiprocket API: tracking by AWB code, order labels and pickups.

https://apidocs.shiprocket.in/#tracking
Unknown AWB is reported either with HTTP 404 or with `track_status` 0 and
an 'error' message inside `tracking_data`.
"""
import datetime
import json
import logging
from typing import Optional
import urllib.parse

from tornado.httpclient import AsyncHTTPClient
import voluptuous as vlps

from app.carriers_auth import shiprocket as shiprocket_auth
from app.modules.errors import ValidationError
from app.modules.shipping.carriers.common import (
	Carrier,
	CarrierProvider,
	CarrierResponseError,
	LabelRequest,
	LabelResult,
	PickupRequest,
	PickupResult,
	TrackingDetails,
	TrackingEvent,
	TrackingNotFoundError,
	chronological,
	parse_timestamp,
)


logger = logging.getLogger(__name__)

_TIMESTAMP_FORMATS = ('%Y-%m-%d %H:%M:%S', '%d %b %Y %H:%M', '%Y-%m-%d')

# Used when order doesn't specify parcel size.
_DEFAULT_SIDE_CM = 10
_DEFAULT_WEIGHT_KG = 0.5

_ACTIVITY_SCHEMA = vlps.Schema({
	vlps.Optional('date'): vlps.Any(str, None),
	vlps.Optional('activity', default=''): vlps.Any(str, None),
	vlps.Optional('sr-status-label'): vlps.Any(str, None),
	vlps.Optional('location'): vlps.Any(str, None),
}, extra=vlps.REMOVE_EXTRA)

_SHIPMENT_TRACK_SCHEMA = vlps.Schema({
	vlps.Optional('current_status'): vlps.Any(str, None),
	vlps.Optional('edd'): vlps.Any(str, None),
}, extra=vlps.REMOVE_EXTRA)

_RESPONSE_SCHEMA = vlps.Schema({
	vlps.Required('tracking_data'): vlps.Schema({
		vlps.Optional('track_status', default=1): vlps.Coerce(int),
		vlps.Optional('error'): vlps.Any(str, None),
		vlps.Optional('shipment_track', default=list): vlps.Any(None, [_SHIPMENT_TRACK_SCHEMA]),
		vlps.Optional('shipment_track_activities', default=list): vlps.Any(None, [_ACTIVITY_SCHEMA]),
		vlps.Optional('etd'): vlps.Any(str, None),
	}, extra=vlps.REMOVE_EXTRA),
}, extra=vlps.REMOVE_EXTRA)


def _find_value(response_data: dict, key: str):
	"""Shiprocket order endpoints put results either at top level, into `data`
	or into `response` (sometimes `response.data`)."""
	containers = [response_data]
	for nested_key in ('data', 'response'):
		nested = response_data.get(nested_key)
		if isinstance(nested, dict):
			containers.append(nested)
			if isinstance(nested.get('data'), dict):
				containers.append(nested['data'])

	for container in containers:
		value = container.get(key)
		if value not in (None, ''):
			return value
	return None


class ShiprocketProvider(CarrierProvider):
	carrier = Carrier.SHIPROCKET
	tracking_url_template = 'https://shiprocket.co/tracking/{tracking_number}'

	def __init__(
		self,
		*,
		base_url: str,
		email: Optional[str],
		password: Optional[str],
		timeout: float,
		pickup_location: str = 'Primary',
		channel_id: str = '',
		http_client: Optional[AsyncHTTPClient] = None
	):
		auth = shiprocket_auth.make_token_cache(
			base_url=base_url,
			email=email,
			password=password,
			timeout=timeout
		)
		super().__init__(timeout=timeout, http_client=http_client, auth=auth)
		self.base_url = base_url
		self.pickup_location = pickup_location
		self.channel_id = channel_id

	async def track(self, tracking_number: str) -> TrackingDetails:
		awb = urllib.parse.quote(tracking_number, safe='')
		request = self.make_request(
			f'{self.base_url}/external/courier/track/awb/{awb}',
			method='GET',
			headers={'Content-Type': 'application/json'}
		)
		response = await self.fetch(request, tracking_number)

		try:
			response_data = _RESPONSE_SCHEMA(self.parse_json(response))
		except vlps.Error as e:
			raise CarrierResponseError(f'Invalid response from Shiprocket: {e}') from e

		return self._normalize(tracking_number, response_data['tracking_data'])

	def _normalize(self, tracking_number: str, tracking_data: dict) -> TrackingDetails:
		if tracking_data['track_status'] == 0:
			logger.debug(
				'Shiprocket: %s not tracked: %s', tracking_number, tracking_data.get('error')
			)
			raise TrackingNotFoundError(f'Shiprocket: {tracking_number} not found')

		shipment_tracks = tracking_data['shipment_track'] or []
		shipment_track = shipment_tracks[0] if shipment_tracks else {}
		activities = tracking_data['shipment_track_activities'] or []

		events = chronological(
			TrackingEvent(
				timestamp=parse_timestamp(activity.get('date'), *_TIMESTAMP_FORMATS),
				status=activity['activity'] or activity.get('sr-status-label') or '',
				location=activity.get('location') or None
			)
			for activity in activities
		)

		status = shipment_track.get('current_status')
		if not status and events:
			status = events[-1].status

		estimated = tracking_data.get('etd') or shipment_track.get('edd')

		return TrackingDetails(
			carrier=self.carrier,
			tracking_number=tracking_number,
			status=status or 'unknown',
			events=events,
			estimated_delivery=parse_timestamp(estimated, *_TIMESTAMP_FORMATS)
		)

	async def generate_label(self, order: LabelRequest) -> LabelResult:
		"""Create ad hoc order, assign AWB to its shipment and generate label.

		Shiprocket may fail to assign AWB right away (e.g. no courier is
		available yet): shipment id is used as tracking number then.
		"""
		created = await self._post(
			'/external/orders/create/adhoc', self._order_payload(order), order.order_id
		)
		shipment_id = _find_value(created, 'shipment_id')
		if shipment_id is None:
			raise CarrierResponseError(f'Shiprocket: no shipment created for order {order.order_id}')
		shipment_id = str(shipment_id)

		assigned = await self._post(
			'/external/courier/assign/awb', {'shipment_id': shipment_id}, order.order_id
		)
		awb = _find_value(assigned, 'awb_code')
		if awb is None:
			logger.warning('Shiprocket: no AWB assigned to shipment %s', shipment_id)
		else:
			awb = str(awb)

		label = await self._post(
			'/external/courier/generate/label', {'shipment_id': [shipment_id]}, order.order_id
		)

		tracking_number = awb or shipment_id
		return LabelResult(
			carrier=self.carrier,
			tracking_number=tracking_number,
			tracking_url=self.get_tracking_url(tracking_number),
			awb=awb,
			shipment_id=shipment_id,
			label_url=_find_value(label, 'label_url')
		)

	async def schedule_pickup(self, pickup: PickupRequest) -> PickupResult:
		if not pickup.shipment_id:
			raise ValidationError('shipmentId is required for Shiprocket pickup')

		payload = {'shipment_id': [pickup.shipment_id]}
		if pickup.pickup_date:
			payload['pickup_date'] = pickup.pickup_date
		scheduled = await self._post(
			'/external/courier/generate/pickup', payload, pickup.shipment_id
		)

		pickup_id = _find_value(scheduled, 'pickup_token_number') or _find_value(scheduled, 'pickup_id')
		return PickupResult(
			pickup_scheduled=True,
			pickup_id=None if pickup_id is None else str(pickup_id),
			pickup_date=_find_value(scheduled, 'pickup_scheduled_date') or pickup.pickup_date
		)

	def _order_payload(self, order: LabelRequest) -> dict:
		address = order.shipping_address
		dimensions = order.dimensions_cm
		collect_amount = order.collect_amount or 0

		return {
			'order_id': order.order_number or order.order_id,
			'order_date': datetime.datetime.now().strftime('%Y-%m-%d %H:%M'),
			'pickup_location': self.pickup_location,
			'channel_id': self.channel_id,
			'billing_customer_name': f'{address.first_name} {address.last_name}',
			'billing_address': address.address1,
			'billing_address_2': address.address2 or '',
			'billing_city': address.city,
			'billing_pincode': address.zip_code,
			'billing_state': address.state,
			'billing_country': address.country,
			'billing_email': '',
			'billing_phone': address.phone or '',
			'shipping_is_billing': True,
			'order_items': [
				{
					'name': item.name,
					'sku': item.sku or item.name,
					'units': item.quantity,
					'selling_price': item.price,
				}
				for item in order.items
			],
			'payment_method': 'COD' if collect_amount > 0 else 'Prepaid',
			'sub_total': sum(item.price * item.quantity for item in order.items),
			'length': dimensions.length if dimensions else _DEFAULT_SIDE_CM,
			'breadth': dimensions.width if dimensions else _DEFAULT_SIDE_CM,
			'height': dimensions.height if dimensions else _DEFAULT_SIDE_CM,
			'weight': order.weight_kg or _DEFAULT_WEIGHT_KG,
			'cod_amount': collect_amount,
		}

	async def _post(self, path: str, payload: dict, reference: str) -> dict:
		request = self.make_request(
			self.base_url + path,
			method='POST',
			headers={'Content-Type': 'application/json'},
			body=json.dumps(payload, separators=(',', ':'))
		)
		# Order endpoints have no 'unknown tracking number' answers.
		response = await self.fetch(request, reference, not_found_codes=())

		response_data = self.parse_json(response)
		if not isinstance(response_data, dict):
			raise CarrierResponseError(f'Invalid response from Shiprocket {path}')
		return response_data
