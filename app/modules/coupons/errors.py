# -*- coding: utf-8 -*-
"""Separate file for coupon exception classes to avoid circular import.
"""
from app.modules.errors import BusinessRuleError, NotFoundError, ValidationError


class MissingCodeError(ValidationError):
	default_message = 'Coupon code is required'


class CouponNotFoundError(NotFoundError):
	default_message = 'Invalid coupon code'


class CouponInactiveError(BusinessRuleError):
	default_message = 'Coupon is not active or has expired'


class UsageLimitExceededError(BusinessRuleError):
	default_message = 'Coupon has reached its usage limit'
