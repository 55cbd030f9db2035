# -*- coding: utf-8 -*-
"""'Externally' adjustable config vars.
"""
from os import environ

# TODO: validation is a good idea.

# Are we in production? False by default.
PRODUCTION = bool(int(environ.get('PRODUCTION', '0')))

# Default HTTPS port by default.
PORT = int(environ['PORT']) if 'PORT' in environ else 443

# Carrier used when tracking request doesn't specify one.
DEFAULT_CARRIER = environ.get('DEFAULT_CARRIER', 'shiprocket')

# Upper bound (seconds) for any single call to a carrier API.
CARRIER_REQUEST_TIMEOUT = float(environ.get('CARRIER_REQUEST_TIMEOUT', '8'))

# Everything for tracking through FedEx.
# Let's minimize possibility of wrong envs by using different input names for
# dev and prod environment.
if PRODUCTION:
	FEDEX_URL = environ.get('FEDEX_URL', 'https://apis.fedex.com')
	FEDEX_TRACKING_API_KEY = environ.get('FEDEX_TRACKING_API_KEY')
	FEDEX_TRACKING_SECRET_KEY = environ.get('FEDEX_TRACKING_SECRET_KEY')
else:
	# '_SANDBOX' added for all input names.
	FEDEX_URL = environ.get('FEDEX_SANDBOX_URL', 'https://apis-sandbox.fedex.com')
	FEDEX_TRACKING_API_KEY = environ.get('FEDEX_TRACKING_SANDBOX_API_KEY')
	FEDEX_TRACKING_SECRET_KEY = environ.get('FEDEX_TRACKING_SANDBOX_SECRET_KEY')

# Shiprocket: bearer token is obtained by logging in with API user.
SHIPROCKET_API_BASE = environ.get('SHIPROCKET_API_BASE', 'https://apiv2.shiprocket.in/v1')
SHIPROCKET_EMAIL = environ.get('SHIPROCKET_EMAIL')
SHIPROCKET_PASSWORD = environ.get('SHIPROCKET_PASSWORD')
# Pickup location nickname as configured in Shiprocket panel.
SHIPROCKET_PICKUP_LOCATION = environ.get('SHIPROCKET_PICKUP_LOCATION', 'Primary')
SHIPROCKET_CHANNEL_ID = environ.get('SHIPROCKET_CHANNEL_ID', '')

# Delhivery: static API token.
DELHIVERY_API_BASE = environ.get('DELHIVERY_API_BASE', 'https://track.delhivery.com')
DELHIVERY_TOKEN = environ.get('DELHIVERY_TOKEN')

# Blue Dart: legacy tracking servlet, login id + licence key in query string.
BLUEDART_API_URL = environ.get(
	'BLUEDART_API_URL',
	'https://api.bluedart.com/servlet/RoutingServlet'
)
BLUEDART_LOGIN_ID = environ.get('BLUEDART_LOGIN_ID')
BLUEDART_LICENSE_KEY = environ.get('BLUEDART_LICENSE_KEY')

# JSON file with coupon records. Empty store if not set.
COUPONS_FILE = environ.get('COUPONS_FILE')
