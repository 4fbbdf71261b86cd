# eet/services/eet/client.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger("eet")


# =========================
# Endpoints EET (tomados desde settings)
# =========================

EET_PLAYGROUND_URL = getattr(
    settings,
    "EET_PLAYGROUND_URL",
    "https://pg.eet.cz:443/eet/services/EETServiceSOAP/v3",
)

EET_PRODUCTION_URL = getattr(
    settings,
    "EET_PRODUCTION_URL",
    "https://prod.eet.cz:443/eet/services/EETServiceSOAP/v3",
)

# La ley exige respuesta en 2 segundos; pasado ese tiempo se emite sin FIK
EET_REQUEST_TIMEOUT = getattr(settings, "EET_REQUEST_TIMEOUT", 2)
EET_SSL_VERIFY = getattr(settings, "EET_SSL_VERIFY", True)
EET_RETRY_MAX = getattr(settings, "EET_RETRY_MAX", 1)
EET_RETRY_BACKOFF = getattr(settings, "EET_RETRY_BACKOFF", 0.2)

SOAP_ACTION = "http://fs.mfcr.cz/eet/OdeslaniTrzby"


@dataclass
class EETResponse:
    """
    Contenedor de respuesta normalizada desde EET.

    - ok: True si hubo respuesta HTTP con cuerpo interpretable.
    - raw: bytes del cuerpo XML tal cual (para response.interpret_response).
    """

    ok: bool
    status_code: Optional[int]
    raw: Optional[bytes]
    mensajes: List[Dict[str, Any]] = field(default_factory=list)


class EETClient:
    """
    Cliente HTTP para el servicio EETServiceSOAP/v3 (operación OdeslaniTrzby).

    El sobre ya viene firmado (envelope.build_envelope); aquí solo se transporta.
    """

    def __init__(self, playground: bool, timeout: Optional[float] = None):
        self.playground = playground
        self.timeout = timeout or EET_REQUEST_TIMEOUT
        self.url = EET_PLAYGROUND_URL if playground else EET_PRODUCTION_URL

        session = requests.Session()
        session.verify = EET_SSL_VERIFY
        session.headers.update(
            {
                "User-Agent": "EETClient/1.0 (Python/requests)",
                "Content-Type": "text/xml; charset=utf-8",
                "SOAPAction": f'"{SOAP_ACTION}"',
            }
        )

        # Solo reintentos de conexión: un POST ya entregado no se repite aquí,
        # el reenvío (prvni_zaslani=false) lo decide el workflow.
        retry = Retry(
            total=EET_RETRY_MAX,
            connect=EET_RETRY_MAX,
            read=0,
            status=0,
            backoff_factor=EET_RETRY_BACKOFF,
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        self.session = session

        logger.info(
            "Inicializando EETClient [url=%s, verify_ssl=%s, timeout=%s, retries=%s]",
            self.url,
            EET_SSL_VERIFY,
            self.timeout,
            EET_RETRY_MAX,
        )

    def enviar(self, envelope: str) -> EETResponse:
        """
        Envía el sobre SOAP firmado y devuelve la respuesta sin interpretar.
        """
        try:
            response = self.session.post(
                self.url,
                data=envelope.encode("utf-8"),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Error de red/timeout al llamar a EET: %s", exc)
            return EETResponse(
                ok=False,
                status_code=None,
                raw=None,
                mensajes=[
                    {
                        "origen": "EET_NETWORK",
                        "detalle": (
                            "No fue posible conectarse al servicio EET. "
                            "La tržba debe reenviarse (prvni_zaslani=false)."
                        ),
                        "error": str(exc),
                    }
                ],
            )

        body = response.content

        if not body:
            logger.warning("Respuesta vacía de EET (HTTP %s)", response.status_code)
            return EETResponse(
                ok=False,
                status_code=response.status_code,
                raw=None,
                mensajes=[
                    {
                        "origen": "EET_UNEXPECTED",
                        "detalle": f"Respuesta vacía de EET (HTTP {response.status_code}).",
                    }
                ],
            )

        logger.info("Respuesta EET HTTP %s (%s bytes)", response.status_code, len(body))
        return EETResponse(ok=True, status_code=response.status_code, raw=body)
