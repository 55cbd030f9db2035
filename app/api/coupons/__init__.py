# -*- coding: utf-8 -*-
from app.api.coupons import validate
