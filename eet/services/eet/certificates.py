# eet/services/eet/certificates.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from django.utils import timezone

from eet.services.eet.errors import CertificateError

if TYPE_CHECKING:
    from eet.models import Poplatnik

logger = logging.getLogger("eet")


@dataclass(frozen=True)
class KeyMaterial:
    private_key: rsa.RSAPrivateKey
    certificate: x509.Certificate

    def __repr__(self) -> str:
        # Nunca exponer la clave privada en logs/tracebacks
        return f"KeyMaterial(certificate={self.certificate.subject.rfc4514_string()!r})"


def load_pkcs12(data: bytes, password: str) -> KeyMaterial:
    """
    Carga el PKCS12 (.p12) emitido por la autoridad EET y devuelve
    la clave privada RSA y el certificado, validando su vigencia.
    """
    try:
        private_key, cert, _additional = pkcs12.load_key_and_certificates(
            data,
            password.encode("utf-8") if password else None,
        )
    except (ValueError, TypeError) as exc:
        logger.warning("Error cargando PKCS12: %s", exc)
        raise CertificateError(f"Error al cargar el archivo PKCS12: {exc}") from exc

    if private_key is None or cert is None:
        raise CertificateError(
            "No se pudo extraer clave privada/certificado desde el archivo PKCS12."
        )
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise CertificateError("El PKCS12 no contiene una clave RSA.")

    now = timezone.now()
    cert_start = cert.not_valid_before_utc
    cert_end = cert.not_valid_after_utc
    if now < cert_start or now > cert_end:
        logger.warning(
            "Certificado %s fuera de vigencia. Válido: %s hasta %s. Ahora: %s",
            cert.subject.rfc4514_string(),
            cert_start,
            cert_end,
            now,
        )
        raise CertificateError(
            f"Certificado vencido. Válido desde {cert_start} hasta {cert_end}"
        )

    logger.debug(
        "Certificado %s válido hasta %s",
        cert.subject.rfc4514_string(),
        cert_end,
    )
    return KeyMaterial(private_key=private_key, certificate=cert)


def load_poplatnik_key_material(poplatnik: "Poplatnik") -> KeyMaterial:
    """
    Lee el .p12 almacenado para el poplatník.
    """
    if not poplatnik.certificado:
        raise CertificateError(
            f"El poplatník {poplatnik.dic_popl} no tiene certificado .p12 cargado."
        )

    cert_path = poplatnik.certificado.path
    if not os.path.exists(cert_path):
        raise CertificateError(
            f"No se encuentra el archivo de certificado en: {cert_path}"
        )

    if not poplatnik.certificado_password:
        raise CertificateError(
            f"El poplatník {poplatnik.dic_popl} no tiene contraseña de certificado configurada."
        )

    try:
        with open(cert_path, "rb") as f:
            data = f.read()
    except OSError as exc:
        logger.exception("Error leyendo archivo .p12: %s", exc)
        raise CertificateError(
            f"Error leyendo archivo de certificado: {exc}"
        ) from exc

    return load_pkcs12(data, poplatnik.certificado_password)
