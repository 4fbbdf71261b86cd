# eet/services/eet/__init__.py
"""
Servicios del protocolo EET (evidence tržeb, esquema v3):

- crypto: digests SHA1/SHA256 y firma RSA-SHA256.
- codes: códigos de control PKP y BKP.
- xml_builder: serialización determinista de Hlavicka/Data/KontrolniKody.
- envelope: sobre SOAP firmado (WS-Security).
- response: interpretación de la respuesta (Odpoved).
- certificates: carga del .p12 del poplatník.
- client: transporte HTTPS hacia EET.
- workflow: orquestación registro + persistencia.
"""
