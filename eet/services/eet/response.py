# eet/services/eet/response.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from django.utils.dateparse import parse_datetime
from lxml import etree

from eet.services.eet.errors import ResponseParsingError, ServerError
from eet.services.eet.types import ParsedReceipt, ReceiptWarning

logger = logging.getLogger("eet")

# Prefijo de atributos: evita colisiones entre atributos y elementos hijos
ATTR_PREFIX = "_"
TEXT_KEY = "#text"

# TODO: verificar la firma WS-Security de la respuesta con el certificado de EET


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
    )


def _element_to_dict(element: etree._Element) -> Dict[str, Any]:
    node: Dict[str, Any] = {}

    for name, value in element.attrib.items():
        node[ATTR_PREFIX + etree.QName(name).localname] = value

    text = (element.text or "").strip()
    if text:
        node[TEXT_KEY] = text

    for child in element:
        if not isinstance(child.tag, str):
            # processing instructions / entidades
            continue
        key = etree.QName(child).localname
        value = _element_to_dict(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    return node


def parse_response_xml(raw: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parsea la respuesta XML de EET a un dict anidado.

    - Las etiquetas se indexan por nombre local (se ignoran los prefijos
      de namespace: soapenv:Body -> Body, eet:Odpoved -> Odpoved).
    - Los atributos llevan el prefijo '_' (ej. '_fik'); el texto va en '#text'.
    - Elementos repetidos se agrupan en listas.

    Lanza ResponseParsingError si el XML no está bien formado.
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")

    try:
        root = etree.fromstring(raw, _new_parser())
    except (etree.XMLSyntaxError, ValueError) as exc:
        logger.warning("Respuesta EET con XML mal formado: %s", exc)
        raise ResponseParsingError("Error parsing XML", str(exc)) from exc

    return {etree.QName(root).localname: _element_to_dict(root)}


def _as_list(value: Any) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _single(value: Any) -> Optional[Dict[str, Any]]:
    items = _as_list(value)
    if not items or not isinstance(items[0], dict):
        return None
    return items[0]


def _find_odpoved(tree: Dict[str, Any]) -> Dict[str, Any]:
    envelope = _single(tree.get("Envelope"))
    body = _single(envelope.get("Body")) if envelope else None
    odpoved = _single(body.get("Odpoved")) if body else None
    if odpoved is None:
        raise ResponseParsingError(
            "Unexpected response shape",
            "Envelope/Body/Odpoved not found",
        )
    return odpoved


def extract_response(tree: Dict[str, Any]) -> ParsedReceipt:
    """
    Transforma el dict de parse_response_xml en ParsedReceipt.

    - Hlavicka + Potvrzeni: registro exitoso (con Varovani opcionales,
      siempre devueltos como secuencia, aunque venga uno solo).
    - Chyba: EET rechazó el mensaje -> ServerError(message, code).
    - Ninguno de los dos: ResponseParsingError.
    """
    odpoved = _find_odpoved(tree)

    hlavicka = _single(odpoved.get("Hlavicka"))
    potvrzeni = _single(odpoved.get("Potvrzeni"))

    if hlavicka is not None and potvrzeni is not None:
        dat_prij = hlavicka.get(ATTR_PREFIX + "dat_prij")
        try:
            received_at = parse_datetime(dat_prij) if dat_prij else None
        except ValueError as exc:
            # bien formada pero fuera de rango (ej. mes 13)
            raise ResponseParsingError(
                "Invalid dat_prij in response header",
                repr(dat_prij),
            ) from exc
        if received_at is None:
            raise ResponseParsingError(
                "Invalid dat_prij in response header",
                repr(dat_prij),
            )

        warnings = tuple(
            ReceiptWarning(
                message=varovani.get(TEXT_KEY),
                code=varovani.get(ATTR_PREFIX + "kod_varov"),
            )
            for varovani in _as_list(odpoved.get("Varovani"))
        )

        return ParsedReceipt(
            uuid=hlavicka.get(ATTR_PREFIX + "uuid_zpravy"),
            bkp=hlavicka.get(ATTR_PREFIX + "bkp"),
            received_at=received_at,
            is_test=potvrzeni.get(ATTR_PREFIX + "test") == "true",
            fik=potvrzeni.get(ATTR_PREFIX + "fik"),
            warnings=warnings,
        )

    chyba = _single(odpoved.get("Chyba"))
    if chyba is not None:
        raise ServerError(
            chyba.get(TEXT_KEY),
            chyba.get(ATTR_PREFIX + "kod"),
            test=chyba.get(ATTR_PREFIX + "test") == "true",
        )

    raise ResponseParsingError(
        "Unexpected response shape",
        "Odpoved contains neither Hlavicka/Potvrzeni nor Chyba",
    )


def interpret_response(raw: Union[str, bytes]) -> ParsedReceipt:
    return extract_response(parse_response_xml(raw))
