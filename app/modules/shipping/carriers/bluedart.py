# -*- coding: utf-8 -*-
"""Handles Blue Dart tracking through their legacy XML servlet.

Response looks like:
<ShipmentData>
	<Shipment WaybillNo="...">
		<Status>SHIPMENT DELIVERED</Status>
		<StatusType>DL</StatusType>
		<ExpectedDeliveryDate>12 March 2024</ExpectedDeliveryDate>
		<Scans>
			<ScanDetail>
				<Scan>...</Scan><ScanDate>10-Mar-2024</ScanDate>
				<ScanTime>12:30</ScanTime><ScannedLocation>MUMBAI</ScannedLocation>
			</ScanDetail>
		</Scans>
	</Shipment>
</ShipmentData>
StatusType 'NF' means waybill is unknown.
"""
from typing import Optional
import urllib.parse
import xml.etree.ElementTree as ET

from tornado.httpclient import AsyncHTTPClient

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


_NOT_FOUND_STATUS_TYPE = 'NF'
_SCAN_TIMESTAMP_FORMATS = ('%d-%b-%Y %H:%M', '%d-%b-%Y')
_DELIVERY_DATE_FORMATS = ('%d %B %Y', '%d-%b-%Y', '%d %b %Y')


def _text(element: ET.Element, tag: str) -> Optional[str]:
	value = element.findtext(tag)
	if value is None:
		return None
	return value.strip() or None


class BluedartProvider(CarrierProvider):
	carrier = Carrier.BLUEDART
	tracking_url_template = 'https://www.bluedart.com/track?awb={tracking_number}'

	def __init__(
		self,
		*,
		api_url: str,
		login_id: Optional[str],
		license_key: Optional[str],
		timeout: float,
		http_client: Optional[AsyncHTTPClient] = None
	):
		super().__init__(timeout=timeout, http_client=http_client)
		self.api_url = api_url
		self._login_id = login_id
		self._license_key = license_key

	async def track(self, tracking_number: str) -> TrackingDetails:
		if not self._login_id or not self._license_key:
			raise CarrierResponseError('Blue Dart credentials are not configured')

		query = urllib.parse.urlencode({
			'handler': 'tnt',
			'action': 'custawbquery',
			'loginid': self._login_id,
			'awb': 'awb',
			'numbers': tracking_number,
			'format': 'xml',
			'lickey': self._license_key,
			'verno': '1.3',
			'scan': '1',
		})
		request = self.make_request(f'{self.api_url}?{query}', method='GET')
		response = await self.fetch(request, tracking_number)

		try:
			root = ET.fromstring(response.body)
		except ET.ParseError as e:
			raise CarrierResponseError('Blue Dart response is not valid XML') from e

		shipment = root.find('Shipment') if root.tag != 'Shipment' else root
		if shipment is None:
			raise CarrierResponseError('No Shipment element in Blue Dart response')

		return self._normalize(tracking_number, shipment)

	def _normalize(self, tracking_number: str, shipment: ET.Element) -> TrackingDetails:
		if _text(shipment, 'StatusType') == _NOT_FOUND_STATUS_TYPE:
			raise TrackingNotFoundError(f'Blue Dart: {tracking_number} not found')

		events = []
		for scan in shipment.iterfind('Scans/ScanDetail'):
			scan_date = _text(scan, 'ScanDate')
			scan_time = _text(scan, 'ScanTime')
			raw_timestamp = ' '.join(part for part in (scan_date, scan_time) if part)
			events.append(TrackingEvent(
				timestamp=parse_timestamp(raw_timestamp, *_SCAN_TIMESTAMP_FORMATS),
				status=_text(scan, 'Scan') or '',
				location=_text(scan, 'ScannedLocation')
			))

		return TrackingDetails(
			carrier=self.carrier,
			tracking_number=tracking_number,
			status=_text(shipment, 'Status') or 'unknown',
			events=chronological(events),
			estimated_delivery=parse_timestamp(
				_text(shipment, 'ExpectedDeliveryDate'),
				*_DELIVERY_DATE_FORMATS
			)
		)
