# eet/services/eet/types.py
# -*- coding: utf-8 -*-
"""
Estructuras de datos del mensaje EET (esquema v3).

Los valores de TransactionFields y MessageHeader ya deben venir en su
representación final de texto; format_datetime / format_amount ayudan a
obtenerla desde datetime / Decimal.
"""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Tuple, Union

from django.utils import timezone

# Orden EXACTO de los campos que entran en el PKP (dic_popl|id_provoz|...|celk_trzba)
PKP_FIELDS: Tuple[str, ...] = (
    "dic_popl",
    "id_provoz",
    "id_pokl",
    "porad_cis",
    "dat_trzby",
    "celk_trzba",
)


def format_datetime(value: datetime) -> str:
    """
    Formato ISO 8601 que exige EET: 2016-08-05T00:30:12+02:00 (sin microsegundos).
    """
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    else:
        value = timezone.localtime(value)
    return value.replace(microsecond=0).isoformat()


def format_amount(value: Union[Decimal, float, int, str]) -> str:
    """Importes con exactamente 2 decimales (ej. 34113.00)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


@dataclass(frozen=True)
class TransactionFields:
    """Atributos del elemento <Data>."""

    dic_popl: str
    id_provoz: str
    id_pokl: str
    porad_cis: str
    dat_trzby: str
    celk_trzba: str
    rezim: str = "0"
    dic_poverujiciho: Optional[str] = None
    zakl_nepodl_dph: Optional[str] = None
    zakl_dan1: Optional[str] = None
    dan1: Optional[str] = None
    zakl_dan2: Optional[str] = None
    dan2: Optional[str] = None
    zakl_dan3: Optional[str] = None
    dan3: Optional[str] = None
    cest_sluz: Optional[str] = None
    pouzit_zboz1: Optional[str] = None
    pouzit_zboz2: Optional[str] = None
    pouzit_zboz3: Optional[str] = None
    urceno_cerp_zuct: Optional[str] = None
    cerp_zuct: Optional[str] = None

    def pkp_values(self) -> Tuple[str, ...]:
        return tuple(getattr(self, name) for name in PKP_FIELDS)

    def as_attributes(self) -> Dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class MessageHeader:
    """Atributos del elemento <Hlavicka>."""

    dat_odesl: str
    prvni_zaslani: bool
    uuid_zpravy: str
    overeni: Optional[bool] = None

    @classmethod
    def new(cls, prvni_zaslani: bool = True, overeni: Optional[bool] = None) -> "MessageHeader":
        return cls(
            dat_odesl=format_datetime(timezone.now()),
            prvni_zaslani=prvni_zaslani,
            uuid_zpravy=str(uuid.uuid4()),
            overeni=overeni,
        )

    def as_attributes(self) -> Dict[str, str]:
        attrs = {
            "dat_odesl": self.dat_odesl,
            "prvni_zaslani": "true" if self.prvni_zaslani else "false",
            "uuid_zpravy": self.uuid_zpravy,
        }
        if self.overeni is not None:
            attrs["overeni"] = "true" if self.overeni else "false"
        return attrs


@dataclass(frozen=True)
class SecurityCodes:
    pkp: str
    bkp: str


@dataclass(frozen=True)
class ReceiptWarning:
    message: Optional[str]
    code: Optional[str]


@dataclass(frozen=True)
class ParsedReceipt:
    """Respuesta exitosa de EET (Hlavicka + Potvrzeni)."""

    uuid: Optional[str]
    bkp: Optional[str]
    received_at: datetime
    is_test: bool
    fik: Optional[str]
    warnings: Tuple[ReceiptWarning, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["received_at"] = self.received_at.isoformat()
        data["warnings"] = [asdict(w) for w in self.warnings]
        return data
