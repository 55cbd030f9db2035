"""Tests for carrier-specific requests and response normalization."""

import asyncio
import datetime
import json
from unittest import mock
import urllib.parse

import pytest
from tornado.httpclient import HTTPClientError

from app.modules.errors import ValidationError
from app.modules.shipping.carriers.bluedart import BluedartProvider
from app.modules.shipping.carriers.common import (
	Carrier,
	CarrierResponseError,
	CarrierUnavailableError,
	Dimensions,
	LabelRequest,
	OrderItem,
	PickupRequest,
	ShippingAddress,
	TrackingNotFoundError,
	UnsupportedOperationError,
)
from app.modules.shipping.carriers.delhivery import DelhiveryProvider
from app.modules.shipping.carriers.fedex import FedexProvider
from app.modules.shipping.carriers.shiprocket import ShiprocketProvider

from tests.helpers import make_http_client, make_response


def _sent_requests(client):
	return [call.args[0] for call in client.fetch.await_args_list]


# ── FedEx ──


def _fedex(client, timeout=1, api_key='key'):
	return FedexProvider(
		base_url='https://fedex.test',
		api_key=api_key,
		secret_key='secret',
		timeout=timeout,
		http_client=client
	)


def _fedex_track_result(**track_result):
	return {
		'transactionId': 'x',
		'output': {
			'completeTrackResults': [{
				'trackingNumber': '123456',
				'trackResults': [track_result],
			}],
		},
	}


FEDEX_AUTH = {'access_token': 'fedex-token', 'token_type': 'bearer', 'expires_in': 3599}


class TestFedex:
	async def test_track(self):
		client = make_http_client(
			make_response(FEDEX_AUTH),
			make_response(_fedex_track_result(
				latestStatusDetail={'code': 'DL', 'description': 'Delivered'},
				scanEvents=[
					{
						'date': '2024-03-11T09:15:00-06:00',
						'eventDescription': 'Delivered',
						'scanLocation': {'city': 'MEMPHIS', 'stateOrProvinceCode': 'TN', 'countryCode': 'US'},
					},
					{
						'date': '2024-03-10T18:00:00-06:00',
						'eventDescription': 'Picked up',
						'scanLocation': {'city': 'DALLAS', 'countryCode': 'US'},
					},
				],
				dateAndTimes=[
					{'type': 'ACTUAL_PICKUP', 'dateTime': '2024-03-10T18:00:00-06:00'},
					{'type': 'ESTIMATED_DELIVERY', 'dateTime': '2024-03-12T00:00:00-06:00'},
				],
			)),
		)

		details = await _fedex(client).track('123456')

		assert details.carrier is Carrier.FEDEX
		assert details.tracking_number == '123456'
		assert details.status == 'Delivered'
		assert [e.status for e in details.events] == ['Picked up', 'Delivered']
		assert details.events[0].location == 'DALLAS, US'
		assert details.events[1].location == 'MEMPHIS, TN, US'
		assert details.estimated_delivery.date() == datetime.date(2024, 3, 12)

		auth_request, track_request = _sent_requests(client)
		assert auth_request.url == 'https://fedex.test/oauth/token'
		assert 'client_id=key' in auth_request.body.decode()
		assert track_request.url == 'https://fedex.test/track/v1/trackingnumbers'
		assert track_request.headers['Authorization'] == 'Bearer fedex-token'
		body = json.loads(track_request.body)
		assert body['trackingInfo'][0]['trackingNumberInfo']['trackingNumber'] == '123456'

	async def test_not_found(self):
		client = make_http_client(
			make_response(FEDEX_AUTH),
			make_response(_fedex_track_result(error={
				'code': 'TRACKING.TRACKINGNUMBER.NOTFOUND',
				'message': 'Tracking number cannot be found.',
			})),
		)
		with pytest.raises(TrackingNotFoundError):
			await _fedex(client).track('000000')

	async def test_other_track_error(self):
		client = make_http_client(
			make_response(FEDEX_AUTH),
			make_response(_fedex_track_result(error={'code': 'SYSTEM.UNAVAILABLE.EXCEPTION'})),
		)
		with pytest.raises(CarrierResponseError):
			await _fedex(client).track('123456')

	async def test_unexpected_shape(self):
		client = make_http_client(make_response(FEDEX_AUTH), make_response({'output': {}}))
		with pytest.raises(CarrierResponseError):
			await _fedex(client).track('123456')

	async def test_rejected_credentials(self):
		client = make_http_client(HTTPClientError(401))
		with pytest.raises(CarrierResponseError):
			await _fedex(client).track('123456')

	async def test_missing_credentials_make_no_calls(self):
		client = make_http_client()
		with pytest.raises(CarrierResponseError):
			await _fedex(client, api_key=None).track('123456')
		client.fetch.assert_not_called()

	async def test_timeout(self):
		async def fetch(request):
			if request.url.endswith('/oauth/token'):
				return make_response(FEDEX_AUTH)
			await asyncio.sleep(10)

		client = mock.Mock()
		client.fetch = mock.AsyncMock(side_effect=fetch)

		with pytest.raises(CarrierUnavailableError):
			await _fedex(client, timeout=0.05).track('123456')


# ── Shiprocket ──


def _shiprocket(client):
	return ShiprocketProvider(
		base_url='https://sr.test/v1',
		email='api@shop.test',
		password='secret',
		timeout=1,
		http_client=client
	)


class TestShiprocket:
	async def test_track(self):
		client = make_http_client(
			make_response({'token': 'sr-token', 'email': 'api@shop.test'}),
			make_response({'tracking_data': {
				'track_status': 1,
				'shipment_status': 7,
				'shipment_track': [{'awb_code': 'SR1', 'current_status': 'Delivered', 'edd': None}],
				'shipment_track_activities': [
					{'date': '2024-03-11 10:00:00', 'activity': 'Delivered', 'location': 'PUNE'},
					{'date': '2024-03-09 08:30:00', 'activity': 'Picked up', 'location': 'MUMBAI'},
				],
				'track_url': 'https://shiprocket.co/tracking/SR1',
				'etd': '2024-03-12 00:00:00',
			}}),
		)

		details = await _shiprocket(client).track('SR1')

		assert details.status == 'Delivered'
		assert [e.location for e in details.events] == ['MUMBAI', 'PUNE']
		assert details.events[0].timestamp == datetime.datetime(2024, 3, 9, 8, 30)
		assert details.estimated_delivery == datetime.datetime(2024, 3, 12)

		login, track = _sent_requests(client)
		assert login.url == 'https://sr.test/v1/external/auth/login'
		assert json.loads(login.body) == {'email': 'api@shop.test', 'password': 'secret'}
		assert track.url == 'https://sr.test/v1/external/courier/track/awb/SR1'
		assert track.headers['Authorization'] == 'Bearer sr-token'

	async def test_not_tracked(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({'tracking_data': {
				'track_status': 0,
				'shipment_status': 0,
				'shipment_track': [{'current_status': ''}],
				'shipment_track_activities': None,
				'error': 'Aahh! There is no activities found in our DB.',
			}}),
		)
		with pytest.raises(TrackingNotFoundError):
			await _shiprocket(client).track('NOPE')

	async def test_status_falls_back_to_last_event(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({'tracking_data': {
				'shipment_track_activities': [
					{'date': '2024-03-09 08:30:00', 'activity': 'Picked up'},
				],
			}}),
		)
		details = await _shiprocket(client).track('SR2')
		assert details.status == 'Picked up'
		assert details.estimated_delivery is None

	async def test_missing_tracking_data(self):
		client = make_http_client(make_response({'token': 'sr-token'}), make_response({'message': 'x'}))
		with pytest.raises(CarrierResponseError):
			await _shiprocket(client).track('SR3')


def _order(**kwargs):
	fields = {
		'order_id': 'ord-1',
		'order_number': 'ORD-1001',
		'items': (
			OrderItem(name='Mug', quantity=2, price=250, sku='MUG-1'),
			OrderItem(name='Poster', quantity=1, price=100),
		),
		'shipping_address': ShippingAddress(
			first_name='Asha',
			last_name='Rao',
			address1='12 MG Road',
			city='Bengaluru',
			state='Karnataka',
			zip_code='560001',
			country='India',
			phone='9999999999'
		),
	}
	fields.update(kwargs)
	return LabelRequest(**fields)


class TestShiprocketShipments:
	async def test_generate_label(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({'order_id': 111, 'shipment_id': 222, 'status': 'NEW'}),
			make_response({'awb_assign_status': 1, 'response': {'data': {'awb_code': 'AWB333'}}}),
			make_response({'label_created': 1, 'label_url': 'https://sr.test/label.pdf'}),
		)

		label = await _shiprocket(client).generate_label(_order())

		assert label.carrier is Carrier.SHIPROCKET
		assert label.shipment_id == '222'
		assert label.awb == 'AWB333'
		assert label.tracking_number == 'AWB333'
		assert label.tracking_url == 'https://shiprocket.co/tracking/AWB333'
		assert label.label_url == 'https://sr.test/label.pdf'

		_, create, assign, generate = _sent_requests(client)
		assert create.url == 'https://sr.test/v1/external/orders/create/adhoc'
		assert create.headers['Authorization'] == 'Bearer sr-token'
		order = json.loads(create.body)
		assert order['order_id'] == 'ORD-1001'
		assert order['billing_customer_name'] == 'Asha Rao'
		assert order['billing_pincode'] == '560001'
		assert order['order_items'][1] == {'name': 'Poster', 'sku': 'Poster', 'units': 1, 'selling_price': 100}
		assert order['sub_total'] == 600
		assert order['payment_method'] == 'Prepaid'
		assert (order['length'], order['breadth'], order['height'], order['weight']) == (10, 10, 10, 0.5)
		assert assign.url == 'https://sr.test/v1/external/courier/assign/awb'
		assert json.loads(assign.body) == {'shipment_id': '222'}
		assert generate.url == 'https://sr.test/v1/external/courier/generate/label'
		assert json.loads(generate.body) == {'shipment_id': ['222']}

	async def test_cash_on_delivery(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({'shipment_id': 222}),
			make_response({'awb_code': 'AWB333'}),
			make_response({'label_url': None}),
		)

		label = await _shiprocket(client).generate_label(_order(
			collect_amount=600,
			weight_kg=1.2,
			dimensions_cm=Dimensions(length=30, width=20, height=5)
		))

		order = json.loads(_sent_requests(client)[1].body)
		assert order['payment_method'] == 'COD'
		assert order['cod_amount'] == 600
		assert (order['length'], order['breadth'], order['height'], order['weight']) == (30, 20, 5, 1.2)
		assert label.label_url is None

	async def test_awb_not_assigned(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({'data': {'shipment_id': 222}}),
			make_response({'awb_assign_status': 0, 'response': {'data': {'awb_assign_error': 'No courier'}}}),
			make_response({'label_created': 0}),
		)

		label = await _shiprocket(client).generate_label(_order())

		assert label.awb is None
		assert label.tracking_number == '222'

	async def test_no_shipment_created(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({'status_code': 1, 'message': 'Order created'}),
		)
		with pytest.raises(CarrierResponseError):
			await _shiprocket(client).generate_label(_order())
		assert client.fetch.await_count == 2

	async def test_rejected_order_is_not_reported_as_unknown_shipment(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			HTTPClientError(404),
		)
		with pytest.raises(CarrierResponseError):
			await _shiprocket(client).generate_label(_order())

	async def test_carrier_down(self):
		client = make_http_client(make_response({'token': 'sr-token'}), HTTPClientError(502))
		with pytest.raises(CarrierUnavailableError):
			await _shiprocket(client).generate_label(_order())

	async def test_schedule_pickup(self):
		client = make_http_client(
			make_response({'token': 'sr-token'}),
			make_response({
				'pickup_status': 1,
				'response': {
					'pickup_scheduled_date': '2026-10-20 12:00:00',
					'pickup_token_number': 'Reference No: 194',
				},
			}),
		)

		pickup = await _shiprocket(client).schedule_pickup(
			PickupRequest(shipment_id='222', pickup_date='2026-10-20')
		)

		assert pickup.pickup_scheduled is True
		assert pickup.pickup_id == 'Reference No: 194'
		assert pickup.pickup_date == '2026-10-20 12:00:00'
		request = _sent_requests(client)[1]
		assert request.url == 'https://sr.test/v1/external/courier/generate/pickup'
		assert json.loads(request.body) == {'shipment_id': ['222'], 'pickup_date': '2026-10-20'}

	async def test_pickup_needs_shipment_id(self):
		client = make_http_client()
		with pytest.raises(ValidationError):
			await _shiprocket(client).schedule_pickup(PickupRequest(awb='AWB333'))
		client.fetch.assert_not_awaited()

	async def test_missing_credentials(self):
		client = make_http_client()
		provider = ShiprocketProvider(base_url='https://sr.test/v1', email=None, password=None, timeout=1, http_client=client)
		with pytest.raises(CarrierResponseError):
			await provider.generate_label(_order())
		client.fetch.assert_not_awaited()


@pytest.mark.parametrize('make_provider', [
	lambda client: _delhivery(client),
	lambda client: _bluedart(client),
	lambda client: _fedex(client),
])
async def test_label_and_pickup_are_not_supported(make_provider):
	client = make_http_client()
	provider = make_provider(client)

	with pytest.raises(UnsupportedOperationError):
		await provider.generate_label(_order())
	with pytest.raises(UnsupportedOperationError):
		await provider.schedule_pickup(PickupRequest(shipment_id='1'))
	client.fetch.assert_not_awaited()


# ── Delhivery ──


def _delhivery(client, token='dl-token'):
	return DelhiveryProvider(base_url='https://dl.test', token=token, timeout=1, http_client=client)


class TestDelhivery:
	async def test_track(self):
		client = make_http_client(make_response({'ShipmentData': [{'Shipment': {
			'AWB': 'DL1',
			'Status': {'Status': 'In Transit', 'StatusLocation': 'Bhiwandi_DC'},
			'ExpectedDeliveryDate': '2024-03-14T23:59:59',
			'Scans': [
				{'ScanDetail': {
					'Scan': 'In Transit',
					'Instructions': 'Shipment forwarded',
					'ScanDateTime': '2024-03-11T04:10:00.123',
					'ScannedLocation': 'Bhiwandi_DC',
				}},
				{'ScanDetail': {
					'Scan': 'Manifested',
					'ScanDateTime': '2024-03-10T12:00:00',
					'ScannedLocation': 'Mumbai_Hub',
				}},
			],
		}}]}))

		details = await _delhivery(client).track('DL1')

		assert details.status == 'In Transit'
		assert [e.status for e in details.events] == ['Manifested', 'Shipment forwarded']
		assert details.estimated_delivery == datetime.datetime(2024, 3, 14, 23, 59, 59)

		(request,) = _sent_requests(client)
		url = urllib.parse.urlsplit(request.url)
		assert url.path == '/api/v1/packages/json/'
		assert urllib.parse.parse_qs(url.query) == {'waybill': ['DL1']}
		assert request.headers['Authorization'] == 'Token dl-token'

	async def test_not_found(self):
		client = make_http_client(make_response({'ShipmentData': [], 'Error': 'No such waybill'}))
		with pytest.raises(TrackingNotFoundError):
			await _delhivery(client).track('NOPE')

	async def test_without_token(self):
		client = make_http_client()
		with pytest.raises(CarrierResponseError):
			await _delhivery(client, token=None).track('DL1')
		client.fetch.assert_not_called()


# ── Blue Dart ──


def _bluedart(client):
	return BluedartProvider(
		api_url='https://bd.test/servlet/RoutingServlet',
		login_id='LOGIN',
		license_key='LICENSE',
		timeout=1,
		http_client=client
	)


BLUEDART_OK = """<?xml version="1.0" encoding="utf-8"?>
<ShipmentData>
	<Shipment WaybillNo="BD1">
		<Status>SHIPMENT DELIVERED</Status>
		<StatusType>DL</StatusType>
		<ExpectedDeliveryDate>12 March 2024</ExpectedDeliveryDate>
		<Scans>
			<ScanDetail>
				<Scan>SHIPMENT DELIVERED</Scan>
				<ScanDate>12-Mar-2024</ScanDate>
				<ScanTime>14:05</ScanTime>
				<ScannedLocation>PUNE</ScannedLocation>
			</ScanDetail>
			<ScanDetail>
				<Scan>SHIPMENT PICKED UP</Scan>
				<ScanDate>10-Mar-2024</ScanDate>
				<ScanTime>09:40</ScanTime>
				<ScannedLocation>MUMBAI</ScannedLocation>
			</ScanDetail>
		</Scans>
	</Shipment>
</ShipmentData>
"""


class TestBluedart:
	async def test_track(self):
		client = make_http_client(make_response(BLUEDART_OK))

		details = await _bluedart(client).track('BD1')

		assert details.status == 'SHIPMENT DELIVERED'
		assert [e.location for e in details.events] == ['MUMBAI', 'PUNE']
		assert details.events[0].timestamp == datetime.datetime(2024, 3, 10, 9, 40)
		assert details.estimated_delivery == datetime.datetime(2024, 3, 12)

		(request,) = _sent_requests(client)
		query = urllib.parse.parse_qs(urllib.parse.urlsplit(request.url).query)
		assert query['numbers'] == ['BD1']
		assert query['loginid'] == ['LOGIN']
		assert query['lickey'] == ['LICENSE']

	async def test_not_found(self):
		client = make_http_client(make_response(
			'<ShipmentData><Shipment WaybillNo="X"><StatusType>NF</StatusType>'
			'<Status>Incorrect Waybill number or No Information</Status></Shipment></ShipmentData>'
		))
		with pytest.raises(TrackingNotFoundError):
			await _bluedart(client).track('X')

	async def test_broken_xml(self):
		client = make_http_client(make_response('<ShipmentData><Shipment>'))
		with pytest.raises(CarrierResponseError):
			await _bluedart(client).track('BD1')
