# eet/viewsets.py
from __future__ import annotations

import logging
from typing import List, Optional

from django.http import Http404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from eet.filters import TrzbaFilter
from eet.models import Poplatnik, Trzba
from eet.permissions import CanRegistrarTrzba, IsEETAdmin
from eet.serializers import PoplatnikSerializer, TrzbaSerializer
from eet.services.eet.workflow import WorkflowError, registrar_trzba_sync
from eet.tasks import registrar_trzba_task

logger = logging.getLogger(__name__)

# Estados desde los que se permite (re)enviar a EET
ESTADOS_ENVIABLES = {
    Trzba.Estado.PENDIENTE,
    Trzba.Estado.ERROR,
    Trzba.Estado.RECHAZADA,
}


class PoplatnikViewSet(viewsets.ModelViewSet):
    """
    CRUD de poplatníci (contribuyentes EET). Solo ADMIN / superusuario.
    """

    queryset = Poplatnik.objects.all().order_by("nombre")
    serializer_class = PoplatnikSerializer
    permission_classes = [IsEETAdmin]


class TrzbaViewSet(viewsets.ModelViewSet):
    """
    API de tržby.

    - list/retrieve: consulta con filtros (TrzbaFilter).
    - create: registra la venta en estado PENDIENTE.
    - acciones custom:
      - registrar-eet       → envío síncrono a EET (devuelve FIK o error)
      - registrar-eet-async → encola registrar_trzba_task (reintentos con backoff)
    """

    serializer_class = TrzbaSerializer
    filterset_class = TrzbaFilter
    permission_classes = [CanRegistrarTrzba]

    def get_queryset(self):
        return Trzba.objects.select_related("poplatnik").all().order_by("-dat_trzby", "-id")

    def perform_create(self, serializer):
        user = self.request.user
        serializer.save(created_by=user if user.is_authenticated else None)

    def destroy(self, request, *args, **kwargs):
        """
        Solo se eliminan tržby PENDIENTE: una vez enviada a EET la venta
        tiene PKP/BKP impresos en el recibo y es un registro fiscal.
        """
        trzba = self.get_object()
        if trzba.estado != Trzba.Estado.PENDIENTE:
            return Response(
                {
                    "detail": (
                        "Solo se pueden eliminar tržby en estado PENDIENTE. "
                        f"Estado actual: {trzba.estado}"
                    )
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().destroy(request, *args, **kwargs)

    def _get_trzba(self, pk: Optional[str]) -> Trzba:
        try:
            return self.get_queryset().get(pk=pk)
        except Trzba.DoesNotExist:
            raise Http404("Tržba no encontrada.")

    def _check_trzba_enviable(self, trzba: Trzba) -> Optional[Response]:
        if trzba.estado not in ESTADOS_ENVIABLES:
            return Response(
                {
                    "detail": (
                        "La tržba no está en un estado válido para envío a EET. "
                        f"Estado actual: {trzba.estado}"
                    )
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return None

    @action(
        detail=True,
        methods=["post"],
        permission_classes=[CanRegistrarTrzba],
        url_path="registrar-eet",
    )
    def registrar_eet(self, request, pk: Optional[str] = None):
        """
        Envía la tržba a EET de forma síncrona.
        Devuelve la tržba serializada más el resultado del workflow en "_workflow".
        """
        trzba = self._get_trzba(pk)

        pre_error = self._check_trzba_enviable(trzba)
        if pre_error is not None:
            return pre_error

        try:
            resultado = registrar_trzba_sync(trzba)
        except WorkflowError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        trzba.refresh_from_db()
        data = self.get_serializer(trzba).data
        data["_workflow"] = resultado

        if resultado.get("ok"):
            return Response(data, status=status.HTTP_200_OK)

        textos: List[str] = []
        for m in resultado.get("mensajes") or []:
            if isinstance(m, dict):
                texto = m.get("detalle") or m.get("mensaje")
                if texto:
                    textos.append(str(texto))
        data["detail"] = " | ".join(textos) or "Error registrando la tržba en EET."
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    @action(
        detail=True,
        methods=["post"],
        permission_classes=[CanRegistrarTrzba],
        url_path="registrar-eet-async",
    )
    def registrar_eet_async(self, request, pk: Optional[str] = None):
        """
        Encola el registro EET en Celery. Útil para reenvíos de tržby en ERROR.
        """
        trzba = self._get_trzba(pk)

        pre_error = self._check_trzba_enviable(trzba)
        if pre_error is not None:
            return pre_error

        async_result = registrar_trzba_task.delay(trzba.id)
        logger.info(
            "registrar_trzba_task encolada para tržba %s (task_id=%s)",
            trzba.id,
            async_result.id,
        )
        return Response(
            {
                "detail": "Registro EET encolado.",
                "task_id": async_result.id,
                "trzba": trzba.id,
            },
            status=status.HTTP_202_ACCEPTED,
        )
