# eet/services/eet/xml_builder.py
# -*- coding: utf-8 -*-
"""
Construcción del XML del mensaje EET como texto determinista.

IMPORTANTE:
- El digest de la firma se calcula sobre EXACTAMENTE el texto que generan
  estas funciones; no se pasa por lxml ni por ningún canonicalizador C14N.
  Cualquier cambio aquí (espacios, orden de atributos, etiquetas) cambia la
  firma y rompe la compatibilidad con EET.
- Los atributos se ordenan por nombre (orden lexicográfico), nunca por orden
  de inserción.
- Nunca se usa la forma autocerrada <x/>: el validador de EET la rechaza.
"""
from __future__ import annotations

from typing import Mapping
from xml.sax.saxutils import escape

from eet.services.eet.types import MessageHeader, SecurityCodes, TransactionFields

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
EET_SCHEMA_NS = "http://fs.mfcr.cz/eet/schema/v3"
XMLDSIG_NS = "http://www.w3.org/2000/09/xmldsig#"

EXC_C14N_ALGORITHM = "http://www.w3.org/2001/10/xml-exc-c14n#"
RSA_SHA256_ALGORITHM = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha256"
ENVELOPED_SIGNATURE_TRANSFORM = "http://www.w3.org/2000/09/xmldsig#enveloped-signature"
SHA256_DIGEST_ALGORITHM = "http://www.w3.org/2001/04/xmlenc#sha256"

BODY_ID = "Body"

_ATTR_ENTITIES = {'"': "&quot;"}


def _escape_attr(value: object) -> str:
    return escape(str(value), _ATTR_ENTITIES)


def render_element(name: str, attributes: Mapping[str, object]) -> str:
    """
    <name a="1" b="2"></name> con los atributos ordenados por clave.
    """
    rendered = "".join(
        f' {key}="{_escape_attr(attributes[key])}"'
        for key in sorted(attributes)
    )
    return f"<{name}{rendered}></{name}>"


def render_security_codes(pkp: str, bkp: str) -> str:
    return (
        "<KontrolniKody>"
        f'<pkp cipher="RSA2048" digest="SHA256" encoding="base64">{pkp}</pkp>'
        f'<bkp digest="SHA1" encoding="base16">{bkp}</bkp>'
        "</KontrolniKody>"
    )


def render_body(
    header: MessageHeader,
    fields: TransactionFields,
    codes: SecurityCodes,
) -> str:
    return (
        f'<soap:Body xmlns:soap="{SOAP_ENV_NS}" id="{BODY_ID}">'
        f'<Trzba xmlns="{EET_SCHEMA_NS}">'
        + render_element("Hlavicka", header.as_attributes())
        + render_element("Data", fields.as_attributes())
        + render_security_codes(codes.pkp, codes.bkp)
        + "</Trzba>"
        "</soap:Body>"
    )


def render_signed_info(digest: str) -> str:
    """
    Bloque <SignedInfo> que referencia al Body (#Body) con su digest SHA256 en base64.
    """
    return (
        f'<SignedInfo xmlns="{XMLDSIG_NS}">'
        f'<CanonicalizationMethod Algorithm="{EXC_C14N_ALGORITHM}"></CanonicalizationMethod>'
        f'<SignatureMethod Algorithm="{RSA_SHA256_ALGORITHM}"></SignatureMethod>'
        f'<Reference URI="#{BODY_ID}">'
        "<Transforms>"
        f'<Transform Algorithm="{ENVELOPED_SIGNATURE_TRANSFORM}"></Transform>'
        f'<Transform Algorithm="{EXC_C14N_ALGORITHM}"></Transform>'
        "</Transforms>"
        f'<DigestMethod Algorithm="{SHA256_DIGEST_ALGORITHM}"></DigestMethod>'
        f"<DigestValue>{digest}</DigestValue>"
        "</Reference>"
        "</SignedInfo>"
    )
