# eet/tests/test_envelope.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import base64
import re

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from django.test import SimpleTestCase
from lxml import etree

from eet.services.eet.codes import generate_security_codes
from eet.services.eet.crypto import hash_sha256_base64, remove_pkcs_header
from eet.services.eet.envelope import build_envelope, build_signed_message
from eet.services.eet.errors import SigningError
from eet.tests.helpers import between, make_certificate, rsa_key, sample_fields, sample_header


class EnvelopeTests(SimpleTestCase):
    """
    Sobre SOAP firmado (WS-Security) de eet.services.eet.envelope.
    """

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.key = rsa_key()
        cls.cert = make_certificate(cls.key)

    def _envelope(self) -> str:
        return build_envelope(sample_header(), sample_fields(), self.key, self.cert)

    def test_xml_bien_formado(self):
        root = etree.fromstring(self._envelope().encode("utf-8"))

        self.assertEqual(etree.QName(root).localname, "Envelope")
        ns = {"eet": "http://fs.mfcr.cz/eet/schema/v3"}
        self.assertIsNotNone(root.find(".//eet:Trzba/eet:Data", ns))

    def test_digest_corresponde_al_body(self):
        xml = self._envelope()

        body = between(xml, "<soap:Body", "</soap:Body>")
        digest = re.search(r"<DigestValue>([^<]+)</DigestValue>", xml).group(1)

        self.assertEqual(digest, hash_sha256_base64(body.encode("utf-8")))
        self.assertTrue(xml.endswith(body + "</soap:Envelope>"))

    def test_firma_verificable_con_el_certificado(self):
        xml = self._envelope()

        signed_info = between(xml, "<SignedInfo", "</SignedInfo>")
        signature = re.search(r"<SignatureValue>([^<]+)</SignatureValue>", xml).group(1)

        self.cert.public_key().verify(
            base64.b64decode(signature),
            signed_info.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )

    def test_token_sin_cabeceras_pem(self):
        xml = self._envelope()

        token = re.search(
            r"<wsse:BinarySecurityToken[^>]*>([^<]+)</wsse:BinarySecurityToken>", xml
        ).group(1)

        self.assertEqual(token, remove_pkcs_header(self.cert))
        self.assertNotIn("-----", xml)
        self.assertIn('wsu:Id="cert"', xml)
        self.assertIn('<wsse:Reference URI="#cert"', xml)

    def test_codigos_en_body_y_en_resultado(self):
        message = build_signed_message(sample_header(), sample_fields(), self.key, self.cert)

        self.assertEqual(message.codes, generate_security_codes(self.key, sample_fields()))
        self.assertIn(f">{message.codes.pkp}</pkp>", message.xml)
        self.assertIn(f">{message.codes.bkp}</bkp>", message.xml)

    def test_clave_invalida_propaga_signing_error(self):
        with self.assertRaises(SigningError):
            build_envelope(sample_header(), sample_fields(), b"not a key", self.cert)
