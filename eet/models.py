# eet/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from eet.services.eet.types import TransactionFields, format_amount, format_datetime


class Poplatnik(models.Model):
    """
    Contribuyente (poplatník) que registra tržby en EET.
    Maneja el certificado de firma y el ambiente (playground/producción).
    """

    class Ambiente(models.TextChoices):
        PLAYGROUND = "PLAYGROUND", "Playground (pruebas)"
        PRODUCCION = "PRODUCCION", "Producción"

    class Rezim(models.TextChoices):
        BEZNY = "0", "Režim běžný"
        ZJEDNODUSENY = "1", "Režim zjednodušený"

    dic_popl = models.CharField(
        max_length=12,
        unique=True,
        help_text="DIČ del poplatník (ej. 'CZ00000019').",
    )
    nombre = models.CharField(max_length=255)

    ambiente = models.CharField(
        max_length=12,
        choices=Ambiente.choices,
        default=Ambiente.PLAYGROUND,
        help_text="Ambiente EET al que se envían las tržby.",
    )
    rezim = models.CharField(
        max_length=1,
        choices=Rezim.choices,
        default=Rezim.BEZNY,
        help_text="Régimen por defecto de las tržby (0=běžný, 1=zjednodušený).",
    )

    # ----- Certificado de firma -----
    certificado = models.FileField(
        upload_to="eet/certificados/",
        null=True,
        blank=True,
        help_text="Archivo .p12 con el certificado emitido para EET.",
    )
    certificado_password = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Contraseña del certificado (idealmente gestionada por un vault).",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Si está desactivado, no puede registrar nuevas tržby.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Poplatník"
        verbose_name_plural = "Poplatníci"

    def __str__(self) -> str:
        return f"{self.nombre} ({self.dic_popl})"

    @property
    def is_playground(self) -> bool:
        return self.ambiente == self.Ambiente.PLAYGROUND


def _amount_field(help_text: str = "") -> models.DecimalField:
    return models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=help_text,
    )


class Trzba(models.Model):
    """
    Tržba (venta) a registrar en EET, con el resultado del registro.
    """

    class Estado(models.TextChoices):
        PENDIENTE = "PENDIENTE", "Pendiente de envío"
        REGISTRADA = "REGISTRADA", "Registrada (con FIK)"
        OVERENA = "OVERENA", "Verificada (modo ověření)"
        RECHAZADA = "RECHAZADA", "Rechazada por EET"
        ENVIANDO = "ENVIANDO", "Enviando a EET"
        ERROR = "ERROR", "Error técnico (sin FIK, reenviar)"

    poplatnik = models.ForeignKey(
        Poplatnik,
        related_name="trzby",
        on_delete=models.PROTECT,
    )

    # ----- Datos de la tržba (elemento <Data>) -----
    id_provoz = models.CharField(max_length=6, help_text="Identificador del establecimiento.")
    id_pokl = models.CharField(max_length=20, help_text="Identificador de la caja.")
    porad_cis = models.CharField(max_length=25, help_text="Número correlativo del recibo.")
    dat_trzby = models.DateTimeField()
    celk_trzba = models.DecimalField(max_digits=12, decimal_places=2)
    dic_poverujiciho = models.CharField(max_length=12, blank=True)

    zakl_nepodl_dph = _amount_field("Importe exento de DPH.")
    zakl_dan1 = _amount_field("Base imponible tasa básica.")
    dan1 = _amount_field("DPH tasa básica.")
    zakl_dan2 = _amount_field("Base imponible primera tasa reducida.")
    dan2 = _amount_field("DPH primera tasa reducida.")
    zakl_dan3 = _amount_field("Base imponible segunda tasa reducida.")
    dan3 = _amount_field("DPH segunda tasa reducida.")
    cest_sluz = _amount_field("Servicios de viaje.")
    pouzit_zboz1 = _amount_field()
    pouzit_zboz2 = _amount_field()
    pouzit_zboz3 = _amount_field()
    urceno_cerp_zuct = _amount_field()
    cerp_zuct = _amount_field()

    rezim = models.CharField(
        max_length=1,
        choices=Poplatnik.Rezim.choices,
        default=Poplatnik.Rezim.BEZNY,
    )
    overeni = models.BooleanField(
        default=False,
        help_text="Modo de verificación: EET valida el mensaje pero no lo registra.",
    )

    # ----- Resultado EET -----
    estado = models.CharField(
        max_length=12,
        choices=Estado.choices,
        default=Estado.PENDIENTE,
        db_index=True,
    )
    pkp = models.TextField(blank=True)
    bkp = models.CharField(max_length=44, blank=True)
    fik = models.CharField(max_length=39, blank=True)
    uuid_zpravy = models.CharField(max_length=36, blank=True)
    dat_odesl = models.DateTimeField(null=True, blank=True)
    dat_prij = models.DateTimeField(null=True, blank=True)
    test = models.BooleanField(default=False)
    intentos = models.PositiveIntegerField(
        default=0,
        help_text="Número de envíos realizados (el primero lleva prvni_zaslani=true).",
    )

    xml_enviado = models.TextField(null=True, blank=True)
    xml_respuesta = models.TextField(null=True, blank=True)
    mensajes_eet = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="trzby_created",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )

    class Meta:
        verbose_name = "Tržba"
        verbose_name_plural = "Tržby"
        ordering = ("-dat_trzby", "-id")
        unique_together = (("poplatnik", "id_provoz", "id_pokl", "porad_cis"),)
        permissions = (("registrar_trzba", "Puede registrar tržby en EET"),)

    def __str__(self) -> str:
        return f"{self.poplatnik.dic_popl} {self.id_provoz}/{self.id_pokl}/{self.porad_cis}"

    @property
    def registrada(self) -> bool:
        return self.estado == self.Estado.REGISTRADA

    def to_transaction_fields(self) -> TransactionFields:
        """
        Convierte la tržba a los atributos de <Data> en su formato final de texto.
        """
        optional_amounts = {
            name: format_amount(getattr(self, name))
            for name in (
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
            )
            if getattr(self, name) is not None
        }

        return TransactionFields(
            dic_popl=self.poplatnik.dic_popl,
            id_provoz=str(self.id_provoz),
            id_pokl=str(self.id_pokl),
            porad_cis=str(self.porad_cis),
            dat_trzby=format_datetime(self.dat_trzby),
            celk_trzba=format_amount(self.celk_trzba),
            rezim=str(self.rezim),
            dic_poverujiciho=self.dic_poverujiciho or None,
            **optional_amounts,
        )
