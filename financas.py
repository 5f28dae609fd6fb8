# financas.py
"""Totais financeiros, intervalos de relatório e séries para gráficos.

Os valores são somados como Decimal, sem arredondamentos a meio do cálculo;
só a apresentação (filtro `dinheiro`) arredonda.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from config import MAPA_TIPO_TRANSACAO, TIPOS_TRANSACAO
from datas import para_date, para_datetime, somar_meses

ZERO = Decimal("0")

TIPOS_RELATORIO = ("semanal", "mensal")

MESES_ABREV = ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"]


@dataclass
class ResumoFinanceiro:
    receitas: Decimal = ZERO
    despesas: Decimal = ZERO
    saldo: Decimal = ZERO
    por_categoria: dict = field(default_factory=dict)


@dataclass
class Relatorio:
    tipo: str
    inicio: date
    fim: date
    resumo: ResumoFinanceiro
    transacoes: list


def normalizar_tipo(tipo):
    tipo = str(tipo or "").strip().lower()
    tipo = MAPA_TIPO_TRANSACAO.get(tipo, tipo)
    if tipo not in TIPOS_TRANSACAO:
        raise ValueError(f"Tipo de transação desconhecido: {tipo}")
    return tipo


def valor_decimal(valor) -> Decimal:
    if valor is None:
        return ZERO
    if isinstance(valor, Decimal):
        return valor
    # str() evita herdar o erro binário de um float
    return Decimal(str(valor))


def contribuicao(transacao) -> Decimal:
    valor = valor_decimal(transacao.get("valor"))
    return valor if transacao.get("tipo") == "entrada" else -valor


def calcular_resumo(transacoes) -> ResumoFinanceiro:
    receitas = ZERO
    despesas = ZERO
    por_categoria = {}
    for transacao in transacoes:
        valor = valor_decimal(transacao.get("valor"))
        if transacao.get("tipo") == "entrada":
            receitas += valor
        elif transacao.get("tipo") == "saida":
            despesas += valor
            categoria = transacao.get("categoria")
            por_categoria[categoria] = por_categoria.get(categoria, ZERO) + valor
    return ResumoFinanceiro(receitas, despesas, receitas - despesas, por_categoria)


def intervalo_relatorio(tipo: str, ancora, inicio_semana: int = 6) -> tuple[date, date]:
    """Limites inclusivos do relatório. `inicio_semana` segue date.weekday() (0 = segunda)."""
    ancora = para_date(ancora)
    if tipo == "semanal":
        recuo = (ancora.weekday() - inicio_semana) % 7
        inicio = ancora - timedelta(days=recuo)
        return inicio, inicio + timedelta(days=6)
    if tipo == "mensal":
        ultimo_dia = calendar.monthrange(ancora.year, ancora.month)[1]
        return ancora.replace(day=1), ancora.replace(day=ultimo_dia)
    raise ValueError(f"Tipo de relatório desconhecido: {tipo}")


def gerar_relatorio(transacoes, tipo: str, ancora, inicio_semana: int = 6) -> Relatorio:
    inicio, fim = intervalo_relatorio(tipo, ancora, inicio_semana)
    no_periodo = [t for t in transacoes if inicio <= para_date(t["data_transacao"]) <= fim]
    no_periodo.sort(key=lambda t: para_datetime(t["data_transacao"]))
    return Relatorio(tipo, inicio, fim, calcular_resumo(no_periodo), no_periodo)


def serie_mensal(transacoes, hoje=None, meses: int = 6) -> list[dict]:
    hoje = para_date(hoje) if hoje is not None else datetime.now().date()
    primeiro = hoje.replace(day=1)
    serie = {}
    for recuo in range(meses - 1, -1, -1):
        mes = somar_meses(primeiro, -recuo)
        serie[(mes.year, mes.month)] = {
            "rotulo": f"{MESES_ABREV[mes.month - 1]}/{mes.year % 100:02d}",
            "receitas": ZERO,
            "despesas": ZERO,
        }
    for transacao in transacoes:
        dia = para_date(transacao["data_transacao"])
        ponto = serie.get((dia.year, dia.month))
        if ponto is None:
            continue
        if transacao.get("tipo") == "entrada":
            ponto["receitas"] += valor_decimal(transacao.get("valor"))
        elif transacao.get("tipo") == "saida":
            ponto["despesas"] += valor_decimal(transacao.get("valor"))
    return list(serie.values())
