# eet/permissions.py
from __future__ import annotations

from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsEETAdmin(BasePermission):
    """
    Administración de poplatníci (certificados, ambiente).

    - user.is_superuser / user.is_staff -> permitido.
    - Usuario en grupo 'ADMIN' / 'Admin' / 'Administrador' -> permitido.
    """

    message = "No tienes permisos de administrador EET para esta operación."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if user.is_superuser or getattr(user, "is_staff", False):
            return True

        return user.groups.filter(name__in=["ADMIN", "Admin", "Administrador"]).exists()


class CanRegistrarTrzba(BasePermission):
    """
    Permiso para crear tržby y enviarlas a EET.

    Lectura: cualquier usuario autenticado.
    Escritura / envío, al menos una de:
      - user.is_superuser
      - user.has_perm('eet.registrar_trzba')
      - grupo 'ADMIN' o 'CAJERO'
    """

    message = "No tienes permisos para registrar tržby en EET."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if request.method in SAFE_METHODS:
            return True

        if user.is_superuser:
            return True

        if user.has_perm("eet.registrar_trzba"):
            return True

        return user.groups.filter(name__in=["ADMIN", "CAJERO"]).exists()
