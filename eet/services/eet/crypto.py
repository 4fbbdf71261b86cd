# eet/services/eet/crypto.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import base64
import hashlib
import re
from typing import Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import Encoding

from eet.services.eet.errors import SigningError

PrivateKeyLike = Union[rsa.RSAPrivateKey, bytes, str]
CertificateLike = Union[x509.Certificate, bytes, str]

# Delimitadores PEM / PKCS#7 que EET no acepta dentro del BinarySecurityToken
_PKCS_HEADER_RE = re.compile(r"-----(BEGIN|END) [A-Z0-9 ]+-----")
_WHITESPACE_RE = re.compile(r"\s+")


def hash_sha1_hex(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def hash_sha256_base64(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")


def _load_private_key(private_key: PrivateKeyLike) -> rsa.RSAPrivateKey:
    """
    Acepta una clave ya cargada o un PEM (bytes/str) sin contraseña.
    """
    if isinstance(private_key, rsa.RSAPrivateKey):
        return private_key

    if isinstance(private_key, str):
        private_key = private_key.encode("ascii")

    if not isinstance(private_key, bytes):
        raise SigningError(
            f"Tipo de clave privada no soportado: {type(private_key).__name__}"
        )

    try:
        key = serialization.load_pem_private_key(private_key, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Clave privada PEM inválida: {exc}") from exc

    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningError("La clave privada no es RSA; EET exige RSA2048.")
    return key


def sign_sha256_base64(private_key: PrivateKeyLike, data: Union[bytes, str]) -> str:
    """
    Firma RSA PKCS#1 v1.5 + SHA-256 y devuelve la firma en base64.

    Lanza SigningError si la clave es inválida o incompatible.
    """
    key = _load_private_key(private_key)
    if isinstance(data, str):
        data = data.encode("utf-8")

    try:
        signature = key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Error al firmar con RSA-SHA256: {exc}") from exc

    return base64.b64encode(signature).decode("ascii")


def remove_pkcs_header(certificate: CertificateLike) -> str:
    """
    Devuelve el certificado como token base64 plano (sin BEGIN/END ni saltos de línea).
    """
    if isinstance(certificate, x509.Certificate):
        certificate = certificate.public_bytes(Encoding.PEM)
    if isinstance(certificate, bytes):
        certificate = certificate.decode("ascii")

    token = _PKCS_HEADER_RE.sub("", certificate)
    return _WHITESPACE_RE.sub("", token)
