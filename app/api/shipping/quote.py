# -*- coding: utf-8 -*-
"""Module with handler that allows to POST for shipping quote.
"""
from app.base_handler import BaseHandler
from app.modules.shipping import quote
from app.validation.shipping import QUOTE_REQUEST_SCHEMA


class ShippingQuoteHandler(BaseHandler):
	def post(self):
		request = self.validate(QUOTE_REQUEST_SCHEMA)

		result = quote.get_quote(
			request['pincode'],
			request['deliveryId'] or quote.DEFAULT_DELIVERY_ID
		)

		self.write({
			'success': True,
			'amount': result.amount,
			'etaDays': result.eta_days,
			'zone': result.zone
		})
