# -*- coding: utf-8 -*-
"""Shipment labels and pickups.

Requests here are already validated with app.validation.shipping schemas.
"""
from typing import Optional

from app.modules.shipping.carriers.common import (
	Dimensions,
	LabelRequest,
	LabelResult,
	OrderItem,
	PickupRequest,
	PickupResult,
	ShippingAddress,
)
from app.modules.shipping.registry import CarrierRegistry


def _address(data: Optional[dict]) -> Optional[ShippingAddress]:
	if data is None:
		return None
	return ShippingAddress(
		first_name=data['firstName'],
		last_name=data['lastName'],
		address1=data['address1'],
		address2=data.get('address2'),
		city=data['city'],
		state=data['state'],
		zip_code=data['zipCode'],
		country=data['country'],
		phone=data.get('phone')
	)


def make_label_request(request: dict) -> LabelRequest:
	dimensions = request.get('dimensionsCm')
	return LabelRequest(
		order_id=request.get('orderId') or request['orderNumber'],
		order_number=request.get('orderNumber'),
		items=tuple(
			OrderItem(
				name=item['name'],
				sku=item.get('sku'),
				quantity=item['quantity'],
				price=item['price']
			)
			for item in request['items']
		),
		shipping_address=_address(request['shippingAddress']),
		weight_kg=request.get('weightKg'),
		dimensions_cm=None if dimensions is None else Dimensions(
			length=dimensions['length'],
			width=dimensions['width'],
			height=dimensions['height']
		),
		collect_amount=request.get('collectAmount')
	)


def make_pickup_request(request: dict) -> PickupRequest:
	return PickupRequest(
		shipment_id=request.get('shipmentId'),
		awb=request.get('awb'),
		pickup_date=request.get('pickupDate'),
		address=_address(request.get('address'))
	)


async def generate_label(
	registry: CarrierRegistry,
	provider: Optional[str],
	order: LabelRequest
) -> LabelResult:
	"""Errors of registry and carrier are propagated."""
	return await registry.resolve(provider).generate_label(order)


async def schedule_pickup(
	registry: CarrierRegistry,
	provider: Optional[str],
	pickup: PickupRequest
) -> PickupResult:
	"""Errors of registry and carrier are propagated."""
	return await registry.resolve(provider).schedule_pickup(pickup)
