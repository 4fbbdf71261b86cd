# eet/apps.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from django.apps import AppConfig


class EETConfig(AppConfig):
    """
    App de registro de tržby en EET (evidence tržeb).
    """
    default_auto_field = "django.db.models.BigAutoField"
    name = "eet"
    label = "eet"
    verbose_name = "EET / Evidence tržeb"
