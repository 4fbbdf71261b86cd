# eet/tests/test_client.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase

from eet.services.eet.client import (
    EET_PLAYGROUND_URL,
    EET_PRODUCTION_URL,
    SOAP_ACTION,
    EETClient,
)


class EETClientTests(SimpleTestCase):
    """
    Transporte HTTP hacia EETServiceSOAP/v3 (sin red: session.post mockeado).
    """

    def test_url_segun_ambiente(self):
        self.assertEqual(EETClient(playground=True).url, EET_PLAYGROUND_URL)
        self.assertEqual(EETClient(playground=False).url, EET_PRODUCTION_URL)

    def test_cabeceras_soap(self):
        client = EETClient(playground=True)

        self.assertEqual(client.session.headers["SOAPAction"], f'"{SOAP_ACTION}"')
        self.assertEqual(client.session.headers["Content-Type"], "text/xml; charset=utf-8")

    def test_envio_exitoso(self):
        client = EETClient(playground=True, timeout=5)
        response = MagicMock(status_code=200, content=b"<Envelope></Envelope>")

        with patch.object(client.session, "post", return_value=response) as mock_post:
            result = client.enviar("<soap:Envelope>ž</soap:Envelope>")

        self.assertTrue(result.ok)
        self.assertEqual(result.raw, b"<Envelope></Envelope>")
        self.assertEqual(result.status_code, 200)
        mock_post.assert_called_once_with(
            EET_PLAYGROUND_URL,
            data="<soap:Envelope>ž</soap:Envelope>".encode("utf-8"),
            timeout=5,
        )

    def test_http_500_con_cuerpo_se_interpreta(self):
        client = EETClient(playground=True)
        response = MagicMock(status_code=500, content=b"<Envelope>fault</Envelope>")

        with patch.object(client.session, "post", return_value=response):
            result = client.enviar("<x></x>")

        self.assertTrue(result.ok)
        self.assertEqual(result.status_code, 500)

    def test_error_de_red(self):
        client = EETClient(playground=True)

        with patch.object(client.session, "post", side_effect=requests.ConnectTimeout("timeout")):
            result = client.enviar("<x></x>")

        self.assertFalse(result.ok)
        self.assertIsNone(result.raw)
        self.assertEqual(result.mensajes[0]["origen"], "EET_NETWORK")
        self.assertIn("timeout", result.mensajes[0]["error"])

    def test_respuesta_vacia(self):
        client = EETClient(playground=False)
        response = MagicMock(status_code=502, content=b"")

        with patch.object(client.session, "post", return_value=response):
            result = client.enviar("<x></x>")

        self.assertFalse(result.ok)
        self.assertEqual(result.mensajes[0]["origen"], "EET_UNEXPECTED")
