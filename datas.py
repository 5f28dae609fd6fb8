# datas.py
from __future__ import annotations

import calendar
from datetime import date, datetime


def parse_data(s: str | None) -> date | None:
    """Data vinda de um formulário (YYYY-MM-DD); vazio devolve None."""
    s = (s or "").strip()
    if not s:
        return None
    return datetime.strptime(s[:10], "%Y-%m-%d").date()


def para_datetime(valor) -> datetime | None:
    if valor is None or valor == "":
        return None
    if isinstance(valor, datetime):
        return valor
    if isinstance(valor, date):
        return datetime(valor.year, valor.month, valor.day)
    return datetime.fromisoformat(str(valor).replace("Z", "+00:00")).replace(tzinfo=None)


def para_date(valor) -> date | None:
    momento = para_datetime(valor)
    return momento.date() if momento is not None else None


def mesmo_dia(a, b) -> bool:
    dia_a, dia_b = para_date(a), para_date(b)
    if dia_a is None or dia_b is None:
        return False
    return (dia_a.year, dia_a.month, dia_a.day) == (dia_b.year, dia_b.month, dia_b.day)


def somar_meses(valor, meses: int):
    """Aritmética de calendário: o dia é mantido ou ajustado ao fim do mês mais curto."""
    indice = valor.month - 1 + meses
    ano = valor.year + indice // 12
    mes = indice % 12 + 1
    dia = min(valor.day, calendar.monthrange(ano, mes)[1])
    return valor.replace(year=ano, month=mes, day=dia)
