# eet/admin.py
from __future__ import annotations

from django.contrib import admin

from eet.models import Poplatnik, Trzba


@admin.register(Poplatnik)
class PoplatnikAdmin(admin.ModelAdmin):
    list_display = (
        "dic_popl",
        "nombre",
        "ambiente",
        "rezim",
        "is_active",
        "created_at",
    )
    list_filter = ("ambiente", "rezim", "is_active")
    search_fields = ("dic_popl", "nombre")
    readonly_fields = ("created_at", "updated_at")
    fieldsets = (
        (
            "Datos generales",
            {"fields": ("dic_popl", "nombre", "is_active")},
        ),
        (
            "EET",
            {"fields": ("ambiente", "rezim")},
        ),
        (
            "Certificado",
            {"fields": ("certificado", "certificado_password")},
        ),
        (
            "Auditoría",
            {"fields": ("created_at", "updated_at")},
        ),
    )


@admin.register(Trzba)
class TrzbaAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "poplatnik",
        "id_provoz",
        "id_pokl",
        "porad_cis",
        "dat_trzby",
        "celk_trzba",
        "estado",
        "fik",
        "intentos",
    )
    list_filter = ("estado", "poplatnik", "overeni", "test")
    search_fields = ("porad_cis", "fik", "bkp", "poplatnik__dic_popl")
    date_hierarchy = "dat_trzby"
    readonly_fields = (
        "pkp",
        "bkp",
        "fik",
        "uuid_zpravy",
        "dat_odesl",
        "dat_prij",
        "test",
        "intentos",
        "mensajes_eet",
        "xml_enviado",
        "xml_respuesta",
        "created_at",
        "updated_at",
        "created_by",
    )
    fieldsets = (
        (
            "Tržba",
            {
                "fields": (
                    "poplatnik",
                    "id_provoz",
                    "id_pokl",
                    "porad_cis",
                    "dat_trzby",
                    "celk_trzba",
                    "dic_poverujiciho",
                    "rezim",
                    "overeni",
                )
            },
        ),
        (
            "Desglose DPH",
            {
                "classes": ("collapse",),
                "fields": (
                    "zakl_nepodl_dph",
                    ("zakl_dan1", "dan1"),
                    ("zakl_dan2", "dan2"),
                    ("zakl_dan3", "dan3"),
                    "cest_sluz",
                    ("pouzit_zboz1", "pouzit_zboz2", "pouzit_zboz3"),
                    ("urceno_cerp_zuct", "cerp_zuct"),
                ),
            },
        ),
        (
            "Resultado EET",
            {
                "fields": (
                    "estado",
                    "fik",
                    "pkp",
                    "bkp",
                    "uuid_zpravy",
                    "dat_odesl",
                    "dat_prij",
                    "test",
                    "intentos",
                    "mensajes_eet",
                )
            },
        ),
        (
            "XML",
            {
                "classes": ("collapse",),
                "fields": ("xml_enviado", "xml_respuesta"),
            },
        ),
        (
            "Auditoría",
            {"fields": ("created_at", "updated_at", "created_by")},
        ),
    )
