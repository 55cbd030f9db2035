# -*- coding: utf-8 -*-
from app.api.shipping import label, pickup, quote, tracking
