# -*- coding: utf-8 -*-
"""Module with handler that allows to GET tracking info.
"""
from app.base_handler import BaseHandler
from app.modules.shipping import tracker
from app.modules.shipping.registry import CarrierRegistry
from app.validation.shipping import TRACKING_REQUEST_SCHEMA


class TrackingHandler(BaseHandler):
	def initialize(self, registry: CarrierRegistry):
		self.registry = registry

	async def get(self):
		"""Get tracking info by tracking number from requested carrier.

		Query: `trackingNumber`, optional `provider` (carrier id).
		"""
		request = self.validate_query_string(TRACKING_REQUEST_SCHEMA)

		result = await self.run_cancellable(tracker.get_tracking_info(
			self.registry,
			request['trackingNumber'],
			provider=request.get('provider')
		))

		self.write(result)
