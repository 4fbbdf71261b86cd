# eet/services/eet/errors.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional


class EETError(Exception):
    """Base de los errores del protocolo EET."""


class SigningError(EETError):
    """Clave privada inválida o incompatible con RSA-SHA256."""


class CertificateError(EETError):
    """Errores relacionados con certificado/carga de PKCS12."""


class ResponseParsingError(EETError):
    """
    La respuesta de EET no es XML bien formado o no tiene la forma esperada.

    - message: descripción corta.
    - detail: diagnóstico original del parser (si existe).
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message if detail is None else f"{message}: {detail}")
        self.message = message
        self.detail = detail


class ServerError(EETError):
    """
    EET rechazó explícitamente la tržba (nodo <Chyba>).

    No es un fallo de transporte: se entrega al llamador para manejo de negocio.
    """

    def __init__(self, message: Optional[str], code: Optional[str], test: bool = False):
        super().__init__(f"[{code}] {message}")
        self.message = message
        self.code = code
        self.test = test

    @property
    def is_verification_ok(self) -> bool:
        # Código 0: el mensaje en modo de verificación (overeni) es válido
        return self.code == "0"
