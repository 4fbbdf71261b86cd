# eet/services/eet/envelope.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass

from eet.services.eet.codes import generate_security_codes
from eet.services.eet.crypto import (
    CertificateLike,
    PrivateKeyLike,
    hash_sha256_base64,
    remove_pkcs_header,
    sign_sha256_base64,
)
from eet.services.eet.types import MessageHeader, SecurityCodes, TransactionFields
from eet.services.eet.xml_builder import (
    SOAP_ENV_NS,
    XMLDSIG_NS,
    render_body,
    render_signed_info,
)

logger = logging.getLogger("eet")

WSSE_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
WSU_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"
BASE64_ENCODING_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-soap-message-security-1.0#Base64Binary"
)
X509V3_VALUE_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-x509-token-profile-1.0#X509v3"
)
CERT_TOKEN_ID = "cert"


@dataclass(frozen=True)
class SignedMessage:
    """Sobre SOAP firmado junto con los códigos PKP/BKP usados en él."""

    xml: str
    codes: SecurityCodes


def _render_envelope(body: str, signed_info: str, signature: str, token: str) -> str:
    return (
        f'<soap:Envelope xmlns:soap="{SOAP_ENV_NS}">'
        "<soap:Header>"
        f'<wsse:Security xmlns:wsse="{WSSE_NS}" xmlns:wsu="{WSU_NS}" soap:mustUnderstand="1">'
        f'<wsse:BinarySecurityToken wsu:Id="{CERT_TOKEN_ID}" '
        f'EncodingType="{BASE64_ENCODING_TYPE}" ValueType="{X509V3_VALUE_TYPE}">'
        f"{token}"
        "</wsse:BinarySecurityToken>"
        f'<Signature xmlns="{XMLDSIG_NS}">'
        f"{signed_info}"
        f"<SignatureValue>{signature}</SignatureValue>"
        "<KeyInfo>"
        "<wsse:SecurityTokenReference>"
        f'<wsse:Reference URI="#{CERT_TOKEN_ID}" ValueType="{X509V3_VALUE_TYPE}"></wsse:Reference>'
        "</wsse:SecurityTokenReference>"
        "</KeyInfo>"
        "</Signature>"
        "</wsse:Security>"
        "</soap:Header>"
        f"{body}"
        "</soap:Envelope>"
    )


def build_signed_message(
    header: MessageHeader,
    fields: TransactionFields,
    private_key: PrivateKeyLike,
    certificate: CertificateLike,
) -> SignedMessage:
    """
    Genera el sobre SOAP completo con firma WS-Security para la tržba.

    Pasos:
    1. PKP/BKP a partir de los campos y la clave privada.
    2. Body serializado (este texto es el que se firma, tal cual).
    3. Digest SHA256 del Body -> SignedInfo.
    4. Firma RSA-SHA256 del SignedInfo.
    5. Certificado sin cabeceras PEM como BinarySecurityToken.

    Los SigningError se propagan sin envolver.
    """
    codes = generate_security_codes(private_key, fields)
    body = render_body(header, fields, codes)
    signed_info = render_signed_info(hash_sha256_base64(body.encode("utf-8")))
    signature = sign_sha256_base64(private_key, signed_info.encode("utf-8"))
    token = remove_pkcs_header(certificate)

    logger.debug(
        "Sobre EET generado uuid_zpravy=%s dic_popl=%s porad_cis=%s bkp=%s",
        header.uuid_zpravy,
        fields.dic_popl,
        fields.porad_cis,
        codes.bkp,
    )

    return SignedMessage(
        xml=_render_envelope(body, signed_info, signature, token),
        codes=codes,
    )


def build_envelope(
    header: MessageHeader,
    fields: TransactionFields,
    private_key: PrivateKeyLike,
    certificate: CertificateLike,
) -> str:
    return build_signed_message(header, fields, private_key, certificate).xml
