# eet/tests/helpers.py
# -*- coding: utf-8 -*-
"""
Utilidades compartidas por los tests EET: claves/certificados generados
al vuelo y respuestas SOAP de ejemplo.
"""
from __future__ import annotations

import datetime as dt
from functools import lru_cache
from typing import Optional, Sequence, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from eet.services.eet.types import MessageHeader, TransactionFields

DIC_POPL = "CZ00000019"


@lru_cache(maxsize=None)
def rsa_key() -> rsa.RSAPrivateKey:
    # Una sola clave por proceso: generar RSA2048 es lento
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_certificate(
    key: Optional[rsa.RSAPrivateKey] = None,
    not_before: Optional[dt.datetime] = None,
    not_after: Optional[dt.datetime] = None,
) -> x509.Certificate:
    key = key or rsa_key()
    now = dt.datetime.now(dt.timezone.utc)
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "CZ"),
            x509.NameAttribute(NameOID.COMMON_NAME, DIC_POPL),
        ]
    )
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - dt.timedelta(days=1))
        .not_valid_after(not_after or now + dt.timedelta(days=365))
        .sign(key, hashes.SHA256())
    )


def sample_fields(**overrides) -> TransactionFields:
    values = {
        "dic_popl": DIC_POPL,
        "id_provoz": "273",
        "id_pokl": "/5546/RO24",
        "porad_cis": "0/6460/ZQ42",
        "dat_trzby": "2016-08-05T00:30:12+02:00",
        "celk_trzba": "34113.00",
    }
    values.update(overrides)
    return TransactionFields(**values)


def sample_header(**overrides) -> MessageHeader:
    values = {
        "dat_odesl": "2016-08-05T00:30:12+02:00",
        "prvni_zaslani": True,
        "uuid_zpravy": "b3a09b52-7c87-4014-a496-4c7a53cf9120",
    }
    values.update(overrides)
    return MessageHeader(**values)


def between(text: str, start: str, end: str) -> str:
    """Substring desde `start` hasta `end` (ambos incluidos)."""
    i = text.index(start)
    j = text.index(end, i) + len(end)
    return text[i:j]


_ENVELOPE = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">'
    "<soapenv:Header>"
    '<wsse:Security xmlns:wsse="http://docs.oasis-open.org/wss/2004/01/'
    'oasis-200401-wss-wssecurity-secext-1.0.xsd" soapenv:mustUnderstand="1">'
    "</wsse:Security>"
    "</soapenv:Header>"
    "<soapenv:Body>"
    '<eet:Odpoved xmlns:eet="http://fs.mfcr.cz/eet/schema/v3">{content}</eet:Odpoved>'
    "</soapenv:Body>"
    "</soapenv:Envelope>"
)


def success_response(
    bkp: str = "9356d566-a3e48838-fb403790-d201244e-95dcbd92",
    fik: str = "b3a09b52-7c87-4014-a496-4c7a53cf9120-ff",
    test: bool = True,
    warnings: Sequence[Tuple[str, str]] = (),
) -> bytes:
    content = (
        '<eet:Hlavicka uuid_zpravy="b3a09b52-7c87-4014-a496-4c7a53cf9120" '
        f'bkp="{bkp}" dat_prij="2016-08-05T00:30:13+02:00"/>'
        f'<eet:Potvrzeni fik="{fik}" test="{"true" if test else "false"}"/>'
    )
    content += "".join(
        f'<eet:Varovani kod_varov="{code}">{text}</eet:Varovani>'
        for code, text in warnings
    )
    return _ENVELOPE.format(content=content).encode("utf-8")


def error_response(
    code: str = "5",
    message: str = "Invalid DIC",
    test: bool = True,
    with_header: bool = True,
) -> bytes:
    content = ""
    if with_header:
        content += (
            '<eet:Hlavicka uuid_zpravy="b3a09b52-7c87-4014-a496-4c7a53cf9120" '
            'dat_odmit="2016-08-05T00:30:13+02:00"/>'
        )
    content += f'<eet:Chyba kod="{code}" test="{"true" if test else "false"}">{message}</eet:Chyba>'
    return _ENVELOPE.format(content=content).encode("utf-8")
