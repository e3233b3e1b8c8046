"""Jinja filters and date formatting helpers."""
from datetime import datetime, date, timezone
from decimal import Decimal, ROUND_HALF_UP

import pytz
from flask import current_app


def _display_tz():
    try:
        return pytz.timezone(current_app.config.get("DISPLAY_TIMEZONE", "Pacific/Auckland"))
    except (RuntimeError, pytz.UnknownTimeZoneError):
        return pytz.timezone("Pacific/Auckland")


def fmt_iso_local(value, use_12h: bool = False) -> str:
    """
    Format a date/datetime (or its ISO string) in the display timezone.
    Supports:
      - 'YYYY-MM-DD' (rendered as a date, no conversion)
      - 'YYYY-MM-DD HH:MM:SS' / 'YYYY-MM-DDTHH:MM:SS'
      - Above with 'Z' or offsets like '+00:00'
    Naive timestamps are taken as UTC. On parse error the original value is
    returned so the UI never goes blank.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    else:
        s = str(value).strip()
        if not s:
            return ""
        s_norm = s.replace("T", " ")
        if s_norm.endswith("Z"):
            s_norm = s_norm[:-1] + "+00:00"
        if ":" not in s_norm:
            # Date-only
            try:
                return datetime.strptime(s_norm, "%Y-%m-%d").strftime("%d/%m/%Y")
            except ValueError:
                return s
        try:
            dt = datetime.fromisoformat(s_norm)
        except ValueError:
            return s

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local = dt.astimezone(_display_tz())

    if use_12h:
        # Avoid %-I (not portable on Windows). Strip any leading zero manually.
        hh = local.strftime("%I").lstrip("0") or "0"
        return f"{local.strftime('%d %b %Y')}, {hh}:{local.strftime('%M %p')}"
    return local.strftime("%d/%m/%Y %H:%M")


def fmt_date(value) -> str:
    """Calendar date of a booking boundary, e.g. 'Jun 01, 2024'."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.strftime("%b %d, %Y")


def money(value) -> str:
    """'$150.00' for any numeric value; '' for None."""
    if value is None or value == "":
        return ""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"${amount:,}"
