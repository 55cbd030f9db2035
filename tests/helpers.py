# -*- coding: utf-8 -*-
"""Fakes shared by tests."""
import io
import json
from typing import Optional
from unittest import mock

from tornado.httpclient import HTTPRequest, HTTPResponse

from app.modules.shipping.carriers.common import (
	Carrier,
	CarrierProvider,
	TrackingDetails,
)


def make_response(body, code: int = 200, url: str = 'https://carrier.test/') -> HTTPResponse:
	"""HTTPResponse as tornado client would return it."""
	if isinstance(body, (dict, list)):
		body = json.dumps(body)
	if isinstance(body, str):
		body = body.encode()
	return HTTPResponse(HTTPRequest(url), code, buffer=io.BytesIO(body))


def make_http_client(*responses) -> mock.Mock:
	"""Client whose `fetch` returns (or raises) `responses` one by one."""
	client = mock.Mock()
	client.fetch = mock.AsyncMock(side_effect=list(responses))
	return client


class StubProvider(CarrierProvider):
	"""Provider which doesn't go anywhere: returns `result` or raises `error`."""
	carrier = Carrier.SHIPROCKET
	tracking_url_template = 'https://stub.test/track/{tracking_number}'

	def __init__(
		self,
		carrier: Carrier = Carrier.SHIPROCKET,
		result: Optional[TrackingDetails] = None,
		error: Optional[BaseException] = None
	):
		super().__init__(timeout=1)
		self.carrier = carrier
		self.result = result
		self.error = error
		self.tracked = []

	async def track(self, tracking_number: str) -> TrackingDetails:
		self.tracked.append(tracking_number)
		if self.error is not None:
			raise self.error
		if self.result is not None:
			return self.result
		return TrackingDetails(
			carrier=self.carrier,
			tracking_number=tracking_number,
			status='In Transit'
		)
