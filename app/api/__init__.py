# -*- coding: utf-8 -*-
from app.api import coupons, service, shipping
