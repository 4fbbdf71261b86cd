# eet/serializers.py
from __future__ import annotations

from rest_framework import serializers

from eet.models import Poplatnik, Trzba


class PoplatnikSerializer(serializers.ModelSerializer):
    """
    Configuración del poplatník (contribuyente EET).
    La contraseña del certificado solo se escribe, nunca se devuelve.
    """

    certificado_nombre = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Poplatnik
        fields = [
            "id",
            "dic_popl",
            "nombre",
            "ambiente",
            "rezim",
            # Firma
            "certificado",
            "certificado_password",
            "certificado_nombre",
            # Estado
            "is_active",
            # Auditoría
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]
        extra_kwargs = {
            "certificado_password": {"write_only": True},
        }

    def get_certificado_nombre(self, obj: Poplatnik):
        if not obj.certificado:
            return None
        return obj.certificado.name.rsplit("/", 1)[-1]


class TrzbaSerializer(serializers.ModelSerializer):
    """
    Tržba con los datos de venta (editables) y el resultado EET (solo lectura).
    """

    poplatnik_dic = serializers.CharField(source="poplatnik.dic_popl", read_only=True)

    class Meta:
        model = Trzba
        fields = [
            "id",
            "poplatnik",
            "poplatnik_dic",
            # Data
            "id_provoz",
            "id_pokl",
            "porad_cis",
            "dat_trzby",
            "celk_trzba",
            "dic_poverujiciho",
            "zakl_nepodl_dph",
            "zakl_dan1",
            "dan1",
            "zakl_dan2",
            "dan2",
            "zakl_dan3",
            "dan3",
            "cest_sluz",
            "pouzit_zboz1",
            "pouzit_zboz2",
            "pouzit_zboz3",
            "urceno_cerp_zuct",
            "cerp_zuct",
            "rezim",
            "overeni",
            # Resultado EET
            "estado",
            "pkp",
            "bkp",
            "fik",
            "uuid_zpravy",
            "dat_odesl",
            "dat_prij",
            "test",
            "intentos",
            "mensajes_eet",
            # Auditoría
            "created_at",
            "updated_at",
            "created_by",
        ]
        read_only_fields = [
            "estado",
            "pkp",
            "bkp",
            "fik",
            "uuid_zpravy",
            "dat_odesl",
            "dat_prij",
            "test",
            "intentos",
            "mensajes_eet",
            "created_at",
            "updated_at",
            "created_by",
        ]

    def validate_poplatnik(self, value: Poplatnik) -> Poplatnik:
        if not value.is_active:
            raise serializers.ValidationError("El poplatník está inactivo.")
        return value

    def validate(self, attrs):
        # Una tržba ya enviada a EET no puede cambiar sus datos firmados
        if self.instance is not None and self.instance.estado != Trzba.Estado.PENDIENTE:
            raise serializers.ValidationError(
                "Solo se pueden modificar tržby en estado PENDIENTE."
            )
        return attrs
