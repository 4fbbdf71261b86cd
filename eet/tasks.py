# eet/tasks.py
from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task
from django.conf import settings

from eet.models import Trzba
from eet.services.eet.workflow import WorkflowError, registrar_trzba_sync

logger = logging.getLogger(__name__)

EET_RESEND_MAX_RETRIES = getattr(settings, "EET_RESEND_MAX_RETRIES", 6)


# =====================================================
# Tarea: Registro EET en background (con backoff)
# =====================================================


@shared_task(
    bind=True,
    max_retries=EET_RESEND_MAX_RETRIES,
    default_retry_delay=60,  # no se usa directamente; hacemos nuestro propio backoff
)
def registrar_trzba_task(self, trzba_id: int) -> Dict[str, Any]:
    """
    Tarea Celery para registrar una tržba en EET.

    - Llama a registrar_trzba_sync(trzba).
    - Si la tržba queda en ERROR (sin respuesta de EET o respuesta ilegible),
      reprograma esta misma tarea con backoff exponencial:
        1, 2, 4, 8, 16, 32 minutos (hasta max_retries).
      Cada reenvío sale con prvni_zaslani=false.
    - RECHAZADA no se reintenta: el mensaje es inválido y hay que corregirlo.
    """
    try:
        trzba = Trzba.objects.select_related("poplatnik").get(pk=trzba_id)
    except Trzba.DoesNotExist:
        logger.error("registrar_trzba_task: Trzba %s no existe.", trzba_id)
        return {"ok": False, "error": "TrzbaDoesNotExist"}

    logger.info(
        "registrar_trzba_task iniciado para trzba_id=%s (intento %s)",
        trzba_id,
        self.request.retries + 1,
    )

    try:
        resultado = registrar_trzba_sync(trzba)
    except WorkflowError as exc:
        # Error de negocio (certificado, poplatník inactivo, ya registrada): no se reintenta
        logger.warning("registrar_trzba_task: tržba %s no enviada: %s", trzba_id, exc)
        return {"ok": False, "error": str(exc)}
    except Exception as exc:  # noqa: BLE001
        logger.exception(
            "Error inesperado en registrar_trzba_task para trzba %s: %s",
            trzba_id,
            exc,
        )
        if self.request.retries < self.max_retries:
            countdown = 60 * (2**self.request.retries)
            raise self.retry(exc=exc, countdown=countdown)
        return {"ok": False, "error": str(exc)}

    trzba.refresh_from_db()

    if trzba.estado == Trzba.Estado.ERROR and self.request.retries < self.max_retries:
        countdown = 60 * (2**self.request.retries)  # 1m, 2m, 4m, 8m, ...
        logger.info(
            "Tržba %s en estado ERROR, reintento registrar_trzba_task en %s segundos.",
            trzba_id,
            countdown,
        )
        raise self.retry(countdown=countdown)

    logger.info(
        "registrar_trzba_task finalizado para trzba_id=%s, estado=%s",
        trzba_id,
        trzba.estado,
    )
    return resultado
