"""
Utilidades de formato compartidas entre el listado de videos y el formateo de items Zotero.

Se mantienen libres de I/O para poder testearlas fácilmente.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from itertools import zip_longest
from typing import Any, Optional, Sequence


# ISO-8601 en formato extendido o básico, con fracción de segundo opcional
# y zona 'Z' u offset (+hh[:mm]).
_ISO8601_RE = re.compile(
    r"^(?P<year>\d{4})-?(?P<month>[01]\d)-?(?P<day>[0-3]\d)"
    r"T(?P<hour>[0-2]\d):?(?P<minute>[0-5]\d):?(?P<second>[0-6]\d)"
    r"(?:\.(?P<fraction>\d{1,6}))?"
    r"(?:Z|(?P<sign>[+-])(?P<off_h>[01]\d):?(?P<off_m>[0-5]\d)?)$"
)

ZOTERO_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def pad(value: Any, length: int, pad_string: str = "0", prepend: bool = True) -> str:
    """
    Rellena un valor hasta `length` caracteres repitiendo `pad_string`.

    Ejemplo:
        pad(4, 3) -> '004'
        pad('text', 10, '~*~') -> '~*~~*~text'
    """
    text = str(value)
    if len(text) >= length:
        return text
    missing = length - len(text)
    padding = (pad_string * (missing // len(pad_string) + 1))[:missing]
    return padding + text if prepend else text + padding


def format_duration(duration: Any) -> str:
    """
    Formatea una duración de Airtable (segundos enteros) como h:mm:ss o m:ss.

    Ejemplos:
        9244 -> '2:34:04'
        2722 -> '45:22'
        27   -> '0:27'

    Valores vacíos o no numéricos retornan ''.
    """
    if duration is None or isinstance(duration, bool):
        return ""
    try:
        total = int(float(duration))
    except (TypeError, ValueError):
        return ""
    if total < 0:
        return ""

    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{pad(minutes, 2)}:{pad(seconds, 2)}"
    return f"{minutes}:{pad(seconds, 2)}"


def parse_iso8601(raw: Any) -> Optional[datetime]:
    """
    Parsea un timestamp ISO-8601 (con zona) a datetime aware.
    Retorna None si el valor no tiene ese formato.
    """
    if not isinstance(raw, str):
        return None
    match = _ISO8601_RE.match(raw.strip())
    if not match:
        return None

    parts = match.groupdict()
    offset = timedelta(0)
    if parts["sign"]:
        offset = timedelta(hours=int(parts["off_h"]), minutes=int(parts["off_m"] or 0))
        if parts["sign"] == "-":
            offset = -offset

    fraction = parts["fraction"] or "0"
    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"]),
            int(parts["minute"]),
            min(int(parts["second"]), 59),
            int(fraction.ljust(6, "0")),
            tzinfo=timezone(offset),
        )
    except ValueError:
        return None


def format_date(raw: Any, tz: Optional[tzinfo] = None) -> Any:
    """
    Convierte una fecha ISO-8601 a 'YYYY-MM-DD hh:mm:ss' (formato amigable para Zotero).

    Args:
        raw: Fecha cruda, puede o no venir en ISO-8601
        tz: Zona horaria de salida. None = hora local del servidor

    Returns:
        La fecha formateada si `raw` es ISO-8601; si no, `raw` tal cual.

    Ejemplo:
        format_date('2020-12-07T21:55:43.000Z', timezone(timedelta(hours=-5)))
        -> '2020-12-07 16:55:43'
    """
    parsed = parse_iso8601(raw)
    if parsed is None:
        return raw
    local = parsed.astimezone(tz) if tz is not None else parsed.astimezone()
    return local.strftime(ZOTERO_DATETIME_FORMAT)


def package_authors(first: Optional[Sequence[str]], last: Optional[Sequence[str]]) -> list[dict[str, str]]:
    """
    Combina listas paralelas de nombres y apellidos en objetos {firstName, lastName}.

    Los pares se forman por posición; si una lista es más corta, la parte
    faltante queda como cadena vacía.
    """
    return [
        {"firstName": f or "", "lastName": l or ""}
        for f, l in zip_longest(first or [], last or [], fillvalue="")
    ]
