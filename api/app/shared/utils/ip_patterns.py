"""
Patrones de IP con comodines para la lista blanca de clientes.

Un patrón es una IPv4 donde cualquier octeto puede ser '*', por ejemplo
'67.118.0.1 255.255.*.*'.
"""
from __future__ import annotations

import re

_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d{2}|[1-9]?\d)"


def patterns_to_regex(patterns: str) -> re.Pattern[str] | None:
    """
    Compila una lista de patrones separados por espacio a una sola expresión regular.

    La expresión se usa con fullmatch: '1.1.1.1' no coincide con '11.1.1.10'.
    Retorna None si no hay patrones (sin restricción).
    """
    parts = [p for p in patterns.split() if p]
    if not parts:
        return None
    alternatives = [
        r"\.".join(_OCTET if octet == "*" else re.escape(octet) for octet in p.split("."))
        for p in parts
    ]
    return re.compile("(?:" + "|".join(alternatives) + ")")


def is_ip_allowed(ip: str | None, whitelist: re.Pattern[str] | None) -> bool:
    """Indica si la IP del cliente está permitida por la lista blanca."""
    if whitelist is None:
        return True
    if not ip:
        return False
    return whitelist.fullmatch(ip) is not None
