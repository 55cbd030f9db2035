# -*- coding: utf-8 -*-
"""Module with validations schemas for client coupon requests.
"""
import voluptuous as vlps

# Used to validate CouponValidateHandler.post request.
# Empty or missing code is reported by CouponValidator itself.
VALIDATE_REQUEST_SCHEMA = vlps.Schema({
	vlps.Optional('code', default=None): vlps.Any(str, None)
}, extra=vlps.REMOVE_EXTRA)
