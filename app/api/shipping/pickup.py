# -*- coding: utf-8 -*-
"""Module with handler that allows to POST for shipment pickup.
"""
from app.base_handler import BaseHandler
from app.modules.shipping import shipments
from app.modules.shipping.registry import CarrierRegistry
from app.validation.shipping import PICKUP_REQUEST_SCHEMA


class ShippingPickupHandler(BaseHandler):
	def initialize(self, registry: CarrierRegistry):
		self.registry = registry

	async def post(self):
		request = self.validate(PICKUP_REQUEST_SCHEMA)

		pickup = await self.run_cancellable(shipments.schedule_pickup(
			self.registry,
			request['provider'],
			shipments.make_pickup_request(request)
		))

		self.write({'pickup': pickup})
