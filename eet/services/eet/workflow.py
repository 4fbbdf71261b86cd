# eet/services/eet/workflow.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from eet.models import Trzba
from eet.services.eet.certificates import load_poplatnik_key_material
from eet.services.eet.client import EETClient
from eet.services.eet.envelope import build_signed_message
from eet.services.eet.errors import (
    CertificateError,
    ResponseParsingError,
    ServerError,
    SigningError,
)
from eet.services.eet.response import interpret_response
from eet.services.eet.types import MessageHeader

logger = logging.getLogger("eet")

EET_ENVIO_BLOQUEO_SEGUNDOS = getattr(settings, "EET_ENVIO_BLOQUEO_SEGUNDOS", 300)


class WorkflowError(Exception):
    """Errores de orquestación EET (precondiciones, certificado, firma)."""


def _update_trzba_status(
    trzba: Trzba,
    estado: str,
    mensajes: List[Dict[str, Any]] | None = None,
    extra_updates: Dict[str, Any] | None = None,
) -> Trzba:
    """
    Helper centralizado para actualizar estado y mensajes de una tržba.

    - Concatena mensajes nuevos con los previos en .mensajes_eet.
    - Actualiza campos extra según extra_updates.
    """
    if mensajes is None:
        mensajes = []
    if extra_updates is None:
        extra_updates = {}

    mensajes_existentes = trzba.mensajes_eet or []
    if not isinstance(mensajes_existentes, list):
        mensajes_existentes = [mensajes_existentes]

    trzba.mensajes_eet = mensajes_existentes + mensajes
    trzba.estado = estado

    for field, value in extra_updates.items():
        setattr(trzba, field, value)

    trzba.updated_at = timezone.now()
    trzba.save()

    logger.info(
        "Tržba %s actualizada a estado=%s (mensajes+=%s)",
        trzba.id,
        trzba.estado,
        len(mensajes),
    )
    return trzba


def _envio_abandonado(trzba: Trzba) -> bool:
    """
    True si un envío quedó en ENVIANDO más de EET_ENVIO_BLOQUEO_SEGUNDOS
    (proceso caído a mitad del envío); entonces se permite reenviar.
    """
    if trzba.dat_odesl is None:
        return True
    return timezone.now() - trzba.dat_odesl > timedelta(seconds=EET_ENVIO_BLOQUEO_SEGUNDOS)


def _resultado(trzba: Trzba, ok: bool, mensajes: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "ok": ok,
        "estado": trzba.estado,
        "fik": trzba.fik or None,
        "pkp": trzba.pkp,
        "bkp": trzba.bkp,
        "mensajes": mensajes,
    }


def registrar_trzba_sync(
    trzba: Trzba,
    client: Optional[EETClient] = None,
) -> Dict[str, Any]:
    """
    Registra una tržba en EET de forma síncrona.

    1. Carga clave/certificado del poplatník.
    2. Genera el sobre firmado (PKP/BKP se guardan ANTES de enviar: el recibo
       debe imprimirlos aunque EET no responda).
    3. Envía y interpreta la respuesta:
       - Potvrzeni  -> REGISTRADA (fik, dat_prij, varovani).
       - Chyba      -> RECHAZADA (u OVERENA con código 0 en modo ověření).
       - Red / XML  -> ERROR (reenviar con prvni_zaslani=false).

    Retorna un dict con ok/estado/fik/pkp/bkp/mensajes.
    Lanza WorkflowError si la tržba no puede enviarse en absoluto.

    La preparación se hace sobre la fila bloqueada (select_for_update) y la
    tržba queda en ENVIANDO mientras dura la llamada a EET; el objeto recibido
    no se modifica, el llamador debe usar refresh_from_db().
    """
    # Bloqueo de fila: dos envíos simultáneos de la misma tržba no pueden
    # salir ambos con prvni_zaslani=true ni pisar el contador de intentos.
    with transaction.atomic():
        trzba = (
            Trzba.objects.select_for_update()
            .select_related("poplatnik")
            .get(pk=trzba.pk)
        )
        poplatnik = trzba.poplatnik

        if not poplatnik.is_active:
            raise WorkflowError(f"El poplatník {poplatnik.dic_popl} está inactivo.")

        if trzba.estado in (Trzba.Estado.REGISTRADA, Trzba.Estado.OVERENA):
            raise WorkflowError(
                f"La tržba {trzba.id} ya fue procesada por EET (estado={trzba.estado})."
            )

        if trzba.estado == Trzba.Estado.ENVIANDO and not _envio_abandonado(trzba):
            raise WorkflowError(f"La tržba {trzba.id} ya se está enviando a EET.")

        try:
            material = load_poplatnik_key_material(poplatnik)
        except CertificateError as exc:
            logger.warning("Certificado inválido para %s: %s", poplatnik.dic_popl, exc)
            raise WorkflowError(str(exc)) from exc

        fields = trzba.to_transaction_fields()
        header = MessageHeader.new(
            prvni_zaslani=trzba.intentos == 0,
            overeni=True if trzba.overeni else None,
        )

        try:
            message = build_signed_message(
                header,
                fields,
                material.private_key,
                material.certificate,
            )
        except SigningError as exc:
            logger.exception("Error firmando la tržba %s: %s", trzba.id, exc)
            raise WorkflowError(f"Error al firmar la tržba: {exc}") from exc

        _update_trzba_status(
            trzba,
            Trzba.Estado.ENVIANDO,
            extra_updates={
                "pkp": message.codes.pkp,
                "bkp": message.codes.bkp,
                "uuid_zpravy": header.uuid_zpravy,
                "dat_odesl": parse_datetime(header.dat_odesl),
                "xml_enviado": message.xml,
                "intentos": trzba.intentos + 1,
            },
        )

    logger.info(
        "Enviando tržba %s a EET (uuid_zpravy=%s, prvni_zaslani=%s, overeni=%s)",
        trzba.id,
        header.uuid_zpravy,
        header.prvni_zaslani,
        trzba.overeni,
    )

    if client is None:
        client = EETClient(playground=poplatnik.is_playground)
    respuesta = client.enviar(message.xml)

    if not respuesta.ok:
        _update_trzba_status(trzba, Trzba.Estado.ERROR, respuesta.mensajes)
        return _resultado(trzba, False, respuesta.mensajes)

    xml_respuesta = respuesta.raw.decode("utf-8", errors="replace")

    try:
        receipt = interpret_response(respuesta.raw)
    except ServerError as exc:
        mensajes = [
            {
                "origen": "EET_CHYBA",
                "kod": exc.code,
                "mensaje": exc.message,
                "test": exc.test,
            }
        ]
        if trzba.overeni and exc.is_verification_ok:
            _update_trzba_status(
                trzba,
                Trzba.Estado.OVERENA,
                mensajes,
                extra_updates={"xml_respuesta": xml_respuesta, "test": exc.test},
            )
            return _resultado(trzba, True, mensajes)

        logger.warning(
            "EET rechazó la tržba %s: kod=%s mensaje=%s",
            trzba.id,
            exc.code,
            exc.message,
        )
        _update_trzba_status(
            trzba,
            Trzba.Estado.RECHAZADA,
            mensajes,
            extra_updates={"xml_respuesta": xml_respuesta, "test": exc.test},
        )
        return _resultado(trzba, False, mensajes)
    except ResponseParsingError as exc:
        mensajes = [
            {
                "origen": "EET_RESPUESTA_INVALIDA",
                "mensaje": exc.message,
                "detalle": exc.detail,
            }
        ]
        _update_trzba_status(
            trzba,
            Trzba.Estado.ERROR,
            mensajes,
            extra_updates={"xml_respuesta": xml_respuesta},
        )
        return _resultado(trzba, False, mensajes)

    mensajes = [
        {
            "origen": "EET_VAROVANI",
            "kod": warning.code,
            "mensaje": warning.message,
        }
        for warning in receipt.warnings
    ]

    if receipt.bkp and receipt.bkp.lower() != message.codes.bkp:
        logger.warning(
            "BKP de la respuesta (%s) no coincide con el enviado (%s) para tržba %s",
            receipt.bkp,
            message.codes.bkp,
            trzba.id,
        )
        mensajes.append(
            {
                "origen": "EET_BKP_DISTINTO",
                "mensaje": "El BKP devuelto por EET no coincide con el enviado.",
                "bkp_respuesta": receipt.bkp,
            }
        )

    _update_trzba_status(
        trzba,
        Trzba.Estado.REGISTRADA,
        mensajes,
        extra_updates={
            "fik": receipt.fik or "",
            "dat_prij": receipt.received_at,
            "test": receipt.is_test,
            "xml_respuesta": xml_respuesta,
        },
    )
    return _resultado(trzba, True, mensajes)
