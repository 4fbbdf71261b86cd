# eet/tests/test_models.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase

from eet.models import Poplatnik, Trzba
from eet.services.eet.types import MessageHeader, format_amount, format_datetime


class FormatHelpersTests(SimpleTestCase):
    def test_format_amount(self):
        self.assertEqual(format_amount(Decimal("34113")), "34113.00")
        self.assertEqual(format_amount("0.005"), "0.01")
        self.assertEqual(format_amount(-12.5), "-12.50")

    def test_format_datetime_hora_local_sin_microsegundos(self):
        value = dt.datetime(2016, 8, 4, 22, 30, 12, 123456, tzinfo=dt.timezone.utc)
        self.assertEqual(format_datetime(value), "2016-08-05T00:30:12+02:00")

    def test_format_datetime_naive(self):
        # naive = hora local de TIME_ZONE (Europe/Prague, invierno +01:00)
        self.assertEqual(
            format_datetime(dt.datetime(2017, 1, 10, 8, 0, 0)),
            "2017-01-10T08:00:00+01:00",
        )

    def test_message_header_new(self):
        primero = MessageHeader.new()
        reenvio = MessageHeader.new(prvni_zaslani=False, overeni=True)

        self.assertNotEqual(primero.uuid_zpravy, reenvio.uuid_zpravy)
        self.assertEqual(len(primero.uuid_zpravy), 36)
        self.assertNotIn("overeni", primero.as_attributes())
        self.assertEqual(reenvio.as_attributes()["overeni"], "true")
        self.assertEqual(reenvio.as_attributes()["prvni_zaslani"], "false")


class TrzbaModelTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.poplatnik = Poplatnik.objects.create(dic_popl="CZ00000019", nombre="Obchod s.r.o.")

    def _trzba(self, **kwargs) -> Trzba:
        values = {
            "poplatnik": self.poplatnik,
            "id_provoz": "273",
            "id_pokl": "/5546/RO24",
            "porad_cis": "0/6460/ZQ42",
            "dat_trzby": dt.datetime(2016, 8, 4, 22, 30, 12, tzinfo=dt.timezone.utc),
            "celk_trzba": Decimal("34113"),
        }
        values.update(kwargs)
        return Trzba.objects.create(**values)

    def test_to_transaction_fields(self):
        trzba = self._trzba(zakl_dan1=Decimal("100"), dan1=Decimal("21"))

        fields = trzba.to_transaction_fields()

        self.assertEqual(
            fields.pkp_values(),
            ("CZ00000019", "273", "/5546/RO24", "0/6460/ZQ42", "2016-08-05T00:30:12+02:00", "34113.00"),
        )
        attrs = fields.as_attributes()
        self.assertEqual(attrs["zakl_dan1"], "100.00")
        self.assertEqual(attrs["dan1"], "21.00")
        self.assertEqual(attrs["rezim"], "0")
        self.assertNotIn("dan2", attrs)
        self.assertNotIn("dic_poverujiciho", attrs)

    def test_numero_de_recibo_unico_por_caja(self):
        self._trzba()
        with self.assertRaises(IntegrityError):
            self._trzba()

    def test_poplatnik_playground_por_defecto(self):
        self.assertTrue(self.poplatnik.is_playground)
        self.assertEqual(str(self.poplatnik), "Obchod s.r.o. (CZ00000019)")
