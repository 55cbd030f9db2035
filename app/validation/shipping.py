# -*- coding: utf-8 -*-
"""Module with validations schemas for client shipping requests.
"""
import voluptuous as vlps

from app.modules.shipping.quote import DEFAULT_DELIVERY_ID, PINCODE_RE
from app.modules.shipping.tracker import TRACKING_NUMBER_MAX_LENGTH

# Used to validate TrackingHandler.get request.
# Carrier id is not checked here: registry knows which carriers exist.
TRACKING_REQUEST_SCHEMA = vlps.Schema({
	vlps.Optional('provider'): str,
	vlps.Required('trackingNumber', msg='trackingNumber is required'): vlps.All(
		str,
		vlps.Strip,
		vlps.Length(min=1, max=TRACKING_NUMBER_MAX_LENGTH)
	)
}, extra=vlps.REMOVE_EXTRA)

# Used to validate ShippingQuoteHandler.post request.
QUOTE_REQUEST_SCHEMA = vlps.Schema({
	vlps.Required('pincode'): vlps.All(
		str,
		vlps.Match(PINCODE_RE, msg='Invalid pincode. Provide a 6-digit code.')
	),
	# Unknown delivery options are quoted as standard one.
	vlps.Optional('deliveryId', default=DEFAULT_DELIVERY_ID): vlps.Any(str, None)
}, extra=vlps.REMOVE_EXTRA)

_POSITIVE_NUMBER = vlps.All(vlps.Any(int, float), vlps.Range(min=0, min_included=False))
_NON_NEGATIVE_NUMBER = vlps.All(vlps.Any(int, float), vlps.Range(min=0))

_ADDRESS_SCHEMA = vlps.Schema({
	vlps.Required('firstName'): str,
	vlps.Required('lastName'): str,
	vlps.Required('address1'): str,
	vlps.Optional('address2'): str,
	vlps.Required('city'): str,
	vlps.Required('state'): str,
	vlps.Required('zipCode'): str,
	vlps.Required('country'): str,
	vlps.Optional('phone'): str,
}, extra=vlps.REMOVE_EXTRA)


def _has_order_reference(request: dict) -> dict:
	if not request.get('orderId') and not request.get('orderNumber'):
		raise vlps.Invalid('orderId or orderNumber is required')
	return request


# Used to validate ShippingLabelHandler.post request.
LABEL_REQUEST_SCHEMA = vlps.All(
	vlps.Schema({
		vlps.Required('provider'): str,
		vlps.Optional('orderId'): str,
		vlps.Optional('orderNumber'): str,
		vlps.Required('shippingAddress'): _ADDRESS_SCHEMA,
		vlps.Required('items'): vlps.All(
			[vlps.Schema({
				vlps.Required('name'): str,
				vlps.Optional('sku'): str,
				vlps.Required('quantity'): vlps.All(int, vlps.Range(min=1)),
				vlps.Required('price'): _NON_NEGATIVE_NUMBER,
			}, extra=vlps.REMOVE_EXTRA)],
			vlps.Length(min=1)
		),
		vlps.Optional('weightKg'): _POSITIVE_NUMBER,
		vlps.Optional('dimensionsCm'): vlps.Schema({
			vlps.Required('length'): _POSITIVE_NUMBER,
			vlps.Required('width'): _POSITIVE_NUMBER,
			vlps.Required('height'): _POSITIVE_NUMBER,
		}, extra=vlps.REMOVE_EXTRA),
		vlps.Optional('collectAmount'): _NON_NEGATIVE_NUMBER,
	}, extra=vlps.REMOVE_EXTRA),
	_has_order_reference
)

# Used to validate ShippingPickupHandler.post request.
PICKUP_REQUEST_SCHEMA = vlps.Schema({
	vlps.Required('provider'): str,
	vlps.Optional('shipmentId'): str,
	vlps.Optional('awb'): str,
	vlps.Optional('pickupDate'): vlps.Date(),
	vlps.Optional('address'): _ADDRESS_SCHEMA,
}, extra=vlps.REMOVE_EXTRA)
