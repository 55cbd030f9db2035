# -*- coding: utf-8 -*-
"""Module with service handlers: health check required by load balancer and
current running application version.
"""
import tornado.web

from app.base_handler import BaseHandler


class HealthCheckHandler(tornado.web.RequestHandler):
	"""Responds with "ok" to any GET/POST request."""
	def get(self):
		self.set_status(200)
		self.write("ok")

	def post(self):
		self.set_status(201)
		self.write("ok")


class VersionHandler(BaseHandler):
	def get(self):
		"""Return current application version and supported carriers."""
		self.write({
			"version": self.application.version,
			"carriers": self.application.registry.carriers,
			"defaultCarrier": self.application.registry.default
		})
