# -*- coding: utf-8 -*-
"""Common module for all handlers in app.api, providing a BaseHandler class that
all handlers should inherit from.
"""
import asyncio
import dataclasses
import datetime
from decimal import Decimal
import enum
import json
import logging
from typing import Awaitable, TypeVar

from tornado import escape
from tornado.log import app_log
import tornado.web
import voluptuous as vlps

from app.errors import RETRY_AFTER, get_client_message, get_error_response
from app.modules.errors import ServiceError, ValidationError


__all__ = ('BaseHandler', 'WideJSONEncoder')

T = TypeVar('T')


def _camel_case(name: str) -> str:
	first, *rest = name.split('_')
	return first + ''.join(word.capitalize() for word in rest)


class WideJSONEncoder(json.JSONEncoder):
	"""Custom json encoder: allows to handle:
	 - dataclasses (field names are converted to camelCase)
	 - date/datetime (ISO 8601)
	 - enums (by value)
	 - Decimal
	"""
	def default(self, obj):
		# Nested dataclasses are converted by the same method one by one.
		if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
			return {
				_camel_case(field.name): getattr(obj, field.name)
				for field in dataclasses.fields(obj)
			}

		if isinstance(obj, (datetime.date, datetime.time)):
			return obj.isoformat()

		if isinstance(obj, enum.Enum):
			return obj.value

		# One could just try last line except TypeError: return str(obj),
		# but let's keep it explicit way and add new types when we need it:
		if isinstance(obj, Decimal):
			return str(obj)

		return super().default(obj)


# pylint: disable=abstract-method
class BaseHandler(tornado.web.RequestHandler):
	"""Base API class for all endpoints.

	Inherit from this if you want to create a new handler.
	Domain errors (app.modules.errors.ServiceError) raised from handler methods
	are converted into {"error": message} responses according to
	app.errors.ERROR_RESPONSES.
	"""
	def __init__(self, *args, **kwargs):
		# Awaitables started through run_cancellable().
		self._pending_tasks = set()
		self._client_gone = False
		super().__init__(*args, **kwargs)

	def set_default_headers(self):
		self.set_header('Access-Control-Allow-Origin', '*')
		self.set_header('Access-Control-Allow-Credentials', 'true')
		self.set_header('Access-Control-Allow-Methods', 'GET, POST, PUT, DELETE, OPTIONS')
		self.set_header(
			'Access-Control-Allow-Headers',
			'Content-Type, Accept-Version, Authorization, CrossDomain, WithCredentials'
		)

	def options(self, *args, **kwargs):  # pylint: disable=arguments-differ
		"""All OPTIONS requests are ignored with silent OK by default."""
		self.finish()

	def write(self, chunk):
		"""Overload of Tornado RequestHandler.write().

		Implemented for default conversion to string while json.dumps().
		This allows to direct usage of Date (and other) objects in response.
		"""
		if isinstance(chunk, dict) or dataclasses.is_dataclass(chunk):
			chunk = json.dumps(
				chunk,
				cls=WideJSONEncoder,
				separators=(',', ':')
			).replace("</", "<\\/")

			self.set_header("Content-Type", "application/json; charset=UTF-8")

		super().write(chunk)

	def write_error(self, status_code, **kwargs):  # pylint: disable=arguments-differ
		"""Send error response to client based on the exception.

		NOTE:
		This should not be called directly.

		Tornado catches all exceptions from handler methods and feeds them here.
		Domain errors get status and message from app.errors, everything
		else gets generic message: internal details never reach the client.
		"""
		error = None
		if 'exc_info' in kwargs:
			error = kwargs['exc_info'][1]

		if error is None or isinstance(error, tornado.web.HTTPError):
			message = self._reason
		else:
			response = get_error_response(error)
			status_code = response.status_code
			message = get_client_message(error, response)
			if response.retryable:
				self.set_header('Retry-After', str(RETRY_AFTER))

		self.set_status(status_code)
		self.finish({'error': message})

	def log_exception(self, typ, value, tb):
		"""Log domain errors according to app.errors.

		Anything else is logged by tornado itself.
		"""
		if not isinstance(value, ServiceError):
			super().log_exception(typ, value, tb)
			return

		response = get_error_response(value)
		if response.log_level is None:
			return

		# Traceback is interesting only for defects, not for carrier hiccups.
		exc_info = (typ, value, tb) if response.log_level >= logging.ERROR else None
		app_log.log(
			response.log_level,
			'%s %s (%s) failed: %s (cause: %r)',
			self.request.method,
			self.request.uri,
			self.request.remote_ip,
			value,
			value.__cause__,
			exc_info=exc_info
		)

	def on_connection_close(self):
		"""Client went away: abandon everything we are waiting for."""
		self._client_gone = True
		for task in self._pending_tasks:
			task.cancel()

	async def run_cancellable(self, awaitable: Awaitable[T]) -> T:
		"""Await `awaitable` in a task which is cancelled if client disconnects.

		In that case tornado.web.Finish is raised, so handler silently ends.
		"""
		task = asyncio.ensure_future(awaitable)
		self._pending_tasks.add(task)
		try:
			return await task
		except asyncio.CancelledError:
			if not self._client_gone:
				raise
			app_log.debug(
				'%s %s: client disconnected, request abandoned',
				self.request.method,
				self.request.uri
			)
			raise tornado.web.Finish()
		finally:
			self._pending_tasks.discard(task)

	def parse_json(self, json_: str = None):
		"""Parses data from json: either given string or self.request.body."""
		if not json_:
			json_ = self.request.body

		try:
			request = escape.json_decode(json_)
		except ValueError as e:
			raise ValidationError("Bad JSON in request body") from e

		return request

	def validate(
		self,
		schema: vlps.Schema,
		data=None,
		custom_message: str = None
	):
		"""Validates `data` according to Voluptuous `schema`.

		If `data` is None then request body will be used.
		`data` will be checked for compliance with the `schema`. New constructed
		object will be returned. `schema` may contain transform instructions, so
		the returned object may be different from the original `data`.

		In case of validation error ValidationError will be raised with given
		message or validator message by default.
		"""
		if data is None:
			data = self.parse_json()

		try:
			data = schema(data)
		except vlps.Error as e:
			message = str(e) if custom_message is None else custom_message
			raise ValidationError(message) from e

		# Validated data
		return data

	def validate_query_string(self, schema: vlps.Schema):
		"""Validate GET request args with Voluptuous.

		All query-string args zipped into dict which then validated by specified
		voluptuous schema.
		Don't forget to use Coerces in your schema, because all GET-request
		args are strings.
		"""
		return self.validate(
			schema,
			{k: self.get_argument(k) for k in self.request.arguments}
		)
