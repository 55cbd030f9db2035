# -*- coding: utf-8 -*-
"""Common part for carriers authorization.
"""
import json
from typing import Awaitable, Callable, Optional

from tornado.httpclient import HTTPClientError, HTTPRequest, HTTPResponse
import voluptuous as vlps


Fetch_T = Callable[[HTTPRequest], Awaitable[HTTPResponse]]
TokenGetter_T = Callable[[Fetch_T], Awaitable[str]]


class CarrierAuthError(Exception):
	"""Base class for all carrier auth errors."""
	pass


async def fetch_auth_data(
	fetch: Fetch_T,
	request: HTTPRequest,
	schema: vlps.Schema,
	carrier_name: str
) -> dict:
	"""Make auth request and validate its JSON response with `schema`.

	4xx from auth endpoint means our credentials are wrong, so CarrierAuthError
	is raised. Other transport errors are propagated as is.
	"""
	try:
		response = await fetch(request)
	except HTTPClientError as e:
		if 400 <= e.code < 500:
			raise CarrierAuthError(f'{carrier_name} rejected credentials: HTTP {e.code}') from e
		raise

	try:
		auth_data = json.loads(response.body.decode())
		auth_data = schema(auth_data)
	except (ValueError, vlps.Error) as e:
		raise CarrierAuthError(f'Invalid auth response from {carrier_name}: {e}') from e

	return auth_data


class BearerTokenCache:
	"""Keeps bearer token between requests to the same carrier.

	`get_token` - coroutine function which obtains fresh token, receives
	low-level fetch function to make its own request.
	"""
	def __init__(self, get_token: TokenGetter_T, scheme: str = 'Bearer'):
		self._get_token = get_token
		self._scheme = scheme
		self._token: Optional[str] = None

	def reset(self):
		self._token = None

	async def fetch(self, fetch: Fetch_T, request: HTTPRequest) -> HTTPResponse:
		"""Make `request` with `fetch` injecting bearer token into it.

		Mutates request headers. If cached token is rejected with 401, gets
		fresh one and repeats the request once.
		"""
		# Get bearer token if cache is empty.
		cold_request = False
		if self._token is None:
			cold_request = True
			self._token = await self._get_token(fetch)
		request.headers['Authorization'] = f'{self._scheme} {self._token}'

		try:
			response = await fetch(request)
		except HTTPClientError as e:
			if not e.code == 401 or cold_request:
				raise
			# If we get 401, most probably, the token was expired.
			# Clean token just in case generation fails.
			self._token = None
			self._token = await self._get_token(fetch)
			request.headers['Authorization'] = f'{self._scheme} {self._token}'
			# Repeat the request with new token.
			response = await fetch(request)

		return response
