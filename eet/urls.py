# eet/urls.py
# -*- coding: utf-8 -*-
"""
Rutas REST del módulo EET. En el urls.py del proyecto:
    path("api/eet/", include("eet.urls", namespace="eet"))
"""

from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from eet.viewsets import PoplatnikViewSet, TrzbaViewSet

app_name = "eet"

router = DefaultRouter()
router.register(r"poplatnici", PoplatnikViewSet, basename="poplatnik")
router.register(r"trzby", TrzbaViewSet, basename="trzba")

urlpatterns = [
    path("", include(router.urls)),
]
