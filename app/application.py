# -*- coding: utf-8 -*-
"""Tornado application: routing table and startup wiring.
"""
import logging
import os.path
from typing import Optional

import tornado.web

from app import api
from app.environs import env
from app.modules.coupons.store import CouponStore, MemoryCouponStore, load_coupon_file
from app.modules.coupons.validator import CouponValidator
from app.modules.shipping.registry import CarrierRegistry, build_registry


logger = logging.getLogger(__name__)

_VERSION_FILE = os.path.join(os.path.dirname(os.path.dirname(os.path.realpath(__file__))), 'VERSION')


def read_version() -> str:
	try:
		with open(_VERSION_FILE) as file:
			return file.read().strip()
	except FileNotFoundError:
		logger.warning('%s not found', _VERSION_FILE)
		return 'unknown'


def make_handlers(registry: CarrierRegistry, validator: CouponValidator) -> list:
	# pylint: disable=bad-whitespace
	return [
		(r"/api/healthcheck",                           api.service.HealthCheckHandler),
		(r"/api/version",                               api.service.VersionHandler),

		# API
		(r"/api/shipping/track",                        api.shipping.tracking.TrackingHandler, {"registry": registry}),
		(r"/api/shipping/quote",                        api.shipping.quote.ShippingQuoteHandler),
		(r"/api/shipping/label",                        api.shipping.label.ShippingLabelHandler, {"registry": registry}),
		(r"/api/shipping/pickup",                       api.shipping.pickup.ShippingPickupHandler, {"registry": registry}),
		(r"/api/coupons/validate",                      api.coupons.validate.CouponValidateHandler, {"validator": validator}),
	]
	# pylint: enable=bad-whitespace


class Application(tornado.web.Application):
	"""Main application class.

	`registry` and `coupon_store` are created once and shared by all requests.
	"""
	def __init__(
		self,
		registry: CarrierRegistry,
		coupon_store: CouponStore,
		version: Optional[str] = None,
		**settings
	):
		self.version = read_version() if version is None else version
		self.registry = registry
		validator = CouponValidator(coupon_store)

		super().__init__(make_handlers(registry, validator), **settings)


def make_app(**settings) -> Application:
	"""Application configured from app.environs.env."""
	registry = build_registry()
	if env.COUPONS_FILE:
		coupon_store = load_coupon_file(env.COUPONS_FILE)
	else:
		logger.warning('COUPONS_FILE is not set, coupon store is empty')
		coupon_store = MemoryCouponStore()

	return Application(registry, coupon_store, **settings)
