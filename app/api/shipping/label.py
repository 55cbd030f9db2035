# -*- coding: utf-8 -*-
"""Module with handler that allows to POST for shipment label.
"""
from app.base_handler import BaseHandler
from app.modules.shipping import shipments
from app.modules.shipping.registry import CarrierRegistry
from app.validation.shipping import LABEL_REQUEST_SCHEMA


class ShippingLabelHandler(BaseHandler):
	def initialize(self, registry: CarrierRegistry):
		self.registry = registry

	async def post(self):
		"""Register order with carrier and get its label and tracking number."""
		request = self.validate(LABEL_REQUEST_SCHEMA)

		label = await self.run_cancellable(shipments.generate_label(
			self.registry,
			request['provider'],
			shipments.make_label_request(request)
		))

		self.write({'label': label})
