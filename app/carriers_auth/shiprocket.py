# -*- coding: utf-8 -*-
"""Handles Shiprocket authorization: API user logs in with email and password
and gets bearer token (valid for 10 days according to Shiprocket docs).
"""
import functools
import json

from tornado.httpclient import HTTPRequest
import voluptuous as vlps

from .common import BearerTokenCache, CarrierAuthError, Fetch_T, fetch_auth_data


class ShiprocketAuthError(CarrierAuthError):
	"""Base class for all Shiprocket auth errors."""
	pass


_AUTH_DATA_SCHEMA = vlps.Schema(
	{vlps.Required('token'): vlps.All(str, vlps.Length(min=1))},
	extra=vlps.REMOVE_EXTRA
)


async def get_auth_token(
	fetch: Fetch_T,
	*,
	base_url: str,
	email: str,
	password: str,
	timeout: float
) -> str:
	"""Get Shiprocket API bearer token."""
	if not email or not password:
		raise ShiprocketAuthError('Shiprocket credentials are not configured')

	request = HTTPRequest(
		url=base_url + '/external/auth/login',
		method='POST',
		headers={'Content-Type': 'application/json'},
		body=json.dumps({'email': email, 'password': password}, separators=(',', ':')),
		connect_timeout=timeout,
		request_timeout=timeout
	)
	try:
		auth_data = await fetch_auth_data(fetch, request, _AUTH_DATA_SCHEMA, 'Shiprocket')
	except CarrierAuthError as e:
		raise ShiprocketAuthError(str(e)) from e

	return auth_data['token']


def make_token_cache(**kwargs) -> BearerTokenCache:
	"""Token cache for Shiprocket provider. `kwargs` are passed to get_auth_token."""
	return BearerTokenCache(functools.partial(get_auth_token, **kwargs))
