# eet/services/eet/codes.py
# -*- coding: utf-8 -*-
"""
Códigos de control obligatorios del recibo EET.

- PKP (podpisový kód poplatníka): firma RSA-SHA256 de
  dic_popl|id_provoz|id_pokl|porad_cis|dat_trzby|celk_trzba, en base64.
- BKP (bezpečnostní kód poplatníka): SHA1 de los bytes crudos del PKP,
  base16 en 5 bloques de 8 caracteres unidos por '-'. Siempre en minúsculas.

Ver "EET popis rozhraní v3.1.1", secciones 4.1 y 4.2.
"""
from __future__ import annotations

import base64
import binascii

from eet.services.eet.crypto import PrivateKeyLike, hash_sha1_hex, sign_sha256_base64
from eet.services.eet.types import SecurityCodes, TransactionFields

BKP_BLOCK_SIZE = 8


def generate_pkp(private_key: PrivateKeyLike, fields: TransactionFields) -> str:
    plain = "|".join(fields.pkp_values())
    return sign_sha256_base64(private_key, plain.encode("ascii"))


def generate_bkp(pkp: str) -> str:
    try:
        raw = base64.b64decode(pkp, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"PKP no es base64 válido: {exc}") from exc

    digest = hash_sha1_hex(raw)
    blocks = [
        digest[i:i + BKP_BLOCK_SIZE]
        for i in range(0, len(digest), BKP_BLOCK_SIZE)
    ]
    return "-".join(blocks).lower()


def generate_security_codes(
    private_key: PrivateKeyLike,
    fields: TransactionFields,
) -> SecurityCodes:
    pkp = generate_pkp(private_key, fields)
    return SecurityCodes(pkp=pkp, bkp=generate_bkp(pkp))
