from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


def _amount(help_text=""):
    return models.DecimalField(
        blank=True, decimal_places=2, help_text=help_text, max_digits=12, null=True
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Poplatnik",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("dic_popl", models.CharField(help_text="DIČ del poplatník (ej. 'CZ00000019').", max_length=12, unique=True)),
                ("nombre", models.CharField(max_length=255)),
                ("ambiente", models.CharField(choices=[("PLAYGROUND", "Playground (pruebas)"), ("PRODUCCION", "Producción")], default="PLAYGROUND", help_text="Ambiente EET al que se envían las tržby.", max_length=12)),
                ("rezim", models.CharField(choices=[("0", "Režim běžný"), ("1", "Režim zjednodušený")], default="0", help_text="Régimen por defecto de las tržby (0=běžný, 1=zjednodušený).", max_length=1)),
                ("certificado", models.FileField(blank=True, help_text="Archivo .p12 con el certificado emitido para EET.", null=True, upload_to="eet/certificados/")),
                ("certificado_password", models.CharField(blank=True, help_text="Contraseña del certificado (idealmente gestionada por un vault).", max_length=255, null=True)),
                ("is_active", models.BooleanField(default=True, help_text="Si está desactivado, no puede registrar nuevas tržby.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Poplatník",
                "verbose_name_plural": "Poplatníci",
            },
        ),
        migrations.CreateModel(
            name="Trzba",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("id_provoz", models.CharField(help_text="Identificador del establecimiento.", max_length=6)),
                ("id_pokl", models.CharField(help_text="Identificador de la caja.", max_length=20)),
                ("porad_cis", models.CharField(help_text="Número correlativo del recibo.", max_length=25)),
                ("dat_trzby", models.DateTimeField()),
                ("celk_trzba", models.DecimalField(decimal_places=2, max_digits=12)),
                ("dic_poverujiciho", models.CharField(blank=True, max_length=12)),
                ("zakl_nepodl_dph", _amount("Importe exento de DPH.")),
                ("zakl_dan1", _amount("Base imponible tasa básica.")),
                ("dan1", _amount("DPH tasa básica.")),
                ("zakl_dan2", _amount("Base imponible primera tasa reducida.")),
                ("dan2", _amount("DPH primera tasa reducida.")),
                ("zakl_dan3", _amount("Base imponible segunda tasa reducida.")),
                ("dan3", _amount("DPH segunda tasa reducida.")),
                ("cest_sluz", _amount("Servicios de viaje.")),
                ("pouzit_zboz1", _amount()),
                ("pouzit_zboz2", _amount()),
                ("pouzit_zboz3", _amount()),
                ("urceno_cerp_zuct", _amount()),
                ("cerp_zuct", _amount()),
                ("rezim", models.CharField(choices=[("0", "Režim běžný"), ("1", "Režim zjednodušený")], default="0", max_length=1)),
                ("overeni", models.BooleanField(default=False, help_text="Modo de verificación: EET valida el mensaje pero no lo registra.")),
                ("estado", models.CharField(choices=[("PENDIENTE", "Pendiente de envío"), ("REGISTRADA", "Registrada (con FIK)"), ("OVERENA", "Verificada (modo ověření)"), ("RECHAZADA", "Rechazada por EET"), ("ENVIANDO", "Enviando a EET"), ("ERROR", "Error técnico (sin FIK, reenviar)")], db_index=True, default="PENDIENTE", max_length=12)),
                ("pkp", models.TextField(blank=True)),
                ("bkp", models.CharField(blank=True, max_length=44)),
                ("fik", models.CharField(blank=True, max_length=39)),
                ("uuid_zpravy", models.CharField(blank=True, max_length=36)),
                ("dat_odesl", models.DateTimeField(blank=True, null=True)),
                ("dat_prij", models.DateTimeField(blank=True, null=True)),
                ("test", models.BooleanField(default=False)),
                ("intentos", models.PositiveIntegerField(default=0, help_text="Número de envíos realizados (el primero lleva prvni_zaslani=true).")),
                ("xml_enviado", models.TextField(blank=True, null=True)),
                ("xml_respuesta", models.TextField(blank=True, null=True)),
                ("mensajes_eet", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="trzby_created", to=settings.AUTH_USER_MODEL)),
                ("poplatnik", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="trzby", to="eet.poplatnik")),
            ],
            options={
                "verbose_name": "Tržba",
                "verbose_name_plural": "Tržby",
                "ordering": ("-dat_trzby", "-id"),
                "permissions": (("registrar_trzba", "Puede registrar tržby en EET"),),
                "unique_together": {("poplatnik", "id_provoz", "id_pokl", "porad_cis")},
            },
        ),
    ]
