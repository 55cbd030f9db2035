# -*- coding: utf-8 -*-
"""Module with handler that allows to POST coupon code for validation.
"""
from app.base_handler import BaseHandler
from app.modules.coupons.validator import CouponValidator
from app.validation.coupons import VALIDATE_REQUEST_SCHEMA


class CouponValidateHandler(BaseHandler):
	def initialize(self, validator: CouponValidator):
		self.validator = validator

	async def post(self):
		"""Return coupon record if it can be applied right now."""
		request = self.validate(VALIDATE_REQUEST_SCHEMA)

		coupon = await self.run_cancellable(self.validator.validate(request['code']))

		self.write(coupon)
