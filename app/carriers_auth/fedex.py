# -*- coding: utf-8 -*-
"""Handles FedEx authorization.
"""
import functools
from typing import TypedDict
import urllib.parse

from tornado.httpclient import HTTPRequest
import voluptuous as vlps

from .common import BearerTokenCache, CarrierAuthError, Fetch_T, fetch_auth_data


class FedexAuthError(CarrierAuthError):
	"""Base class for all FedEx auth errors."""
	pass


# Expected response from FedEx auth API.
# Let's make it explicit: describe only keys we are using.
_AUTH_DATA_SCHEMA = vlps.Schema(
	{vlps.Required('access_token'): str},
	extra=vlps.REMOVE_EXTRA
)


class AuthData(TypedDict):
	access_token: str


async def _get_auth_data(
	fetch: Fetch_T,
	base_url: str,
	api_key: str,
	secret_key: str,
	timeout: float,
	endpoint: str = '/oauth/token'  # v1
) -> AuthData:
	"""Get full JSON response from FedEx auth API.

	`api_key` - tracking API key (referred as 'client_id' in auth requests).
	`secret_key` - tracking API secret key (referred as 'client_secret' in auth requests).
	`endpoint` - URL of auth endpoint relative to `base_url`.

	FedexAuthError will be raised in case of auth error.
	"""
	if not api_key or not secret_key:
		raise FedexAuthError('FedEx credentials are not configured')

	params = {
		'grant_type': 'client_credentials',
		'client_id': api_key,
		'client_secret': secret_key
	}
	request = HTTPRequest(
		url=base_url + endpoint,
		method='POST',
		headers={'Content-Type': 'application/x-www-form-urlencoded'},
		body=urllib.parse.urlencode(params),
		connect_timeout=timeout,
		request_timeout=timeout
	)

	try:
		return await fetch_auth_data(fetch, request, _AUTH_DATA_SCHEMA, 'FedEx')
	except CarrierAuthError as e:
		raise FedexAuthError(str(e)) from e


async def get_auth_token(
	fetch: Fetch_T,
	*,
	base_url: str,
	api_key: str,
	secret_key: str,
	timeout: float
) -> str:
	"""Get FedEx API bearer token."""
	auth_data = await _get_auth_data(fetch, base_url, api_key, secret_key, timeout)
	return auth_data['access_token']


def make_token_cache(**kwargs) -> BearerTokenCache:
	"""Token cache for FedEx provider. `kwargs` are passed to get_auth_token."""
	return BearerTokenCache(functools.partial(get_auth_token, **kwargs))
