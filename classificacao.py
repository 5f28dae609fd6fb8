# classificacao.py
"""Estados derivados: atrasos e revisões em falta.

Nada aqui reescreve o status gravado; o status persistido continua a ser o
que vale, mesmo quando discorda do cálculo.
"""
from datetime import datetime

from config import MAPA_STATUS_MANUTENCAO, STATUS_MANUTENCAO, Config
from datas import para_datetime, somar_meses


def normalizar_status(status):
    if status is None:
        return None
    status = str(status).strip().lower()
    status = MAPA_STATUS_MANUTENCAO.get(status, status)
    if status not in STATUS_MANUTENCAO:
        raise ValueError(f"Status de manutenção desconhecido: {status}")
    return status


def esta_atrasada(data_agendada, agora=None):
    agora = agora or datetime.now()
    return para_datetime(data_agendada) < agora


def rotulo_atraso(data_agendada, agora=None):
    return "atrasado" if esta_atrasada(data_agendada, agora) else "agendado"


def ultima_manutencao_completa(veiculo_id, manutencoes):
    completas = [m for m in manutencoes if m.get("veiculo_id") == veiculo_id and m.get("status") == "completo"]
    if not completas:
        return None
    ultima = completas[0]
    for atual in completas[1:]:
        if para_datetime(atual["data_manutencao"]) > para_datetime(ultima["data_manutencao"]):
            ultima = atual
    return ultima


def precisa_manutencao_em_breve(veiculo_id, manutencoes, agora=None, meses=None):
    agora = agora or datetime.now()
    meses = Config.MESES_REVISAO if meses is None else meses
    ultima = ultima_manutencao_completa(veiculo_id, manutencoes)
    if ultima is None:
        return True
    limite = somar_meses(para_datetime(ultima["data_manutencao"]), meses)
    return agora > limite


def manutencoes_atrasadas(manutencoes, agora=None):
    agora = agora or datetime.now()
    return [m for m in manutencoes if m.get("status") == "pendente" and para_datetime(m["data_manutencao"]) < agora]


def manutencoes_proximas(manutencoes, agora=None):
    agora = agora or datetime.now()
    return [m for m in manutencoes if m.get("status") == "agendado" and para_datetime(m["data_manutencao"]) > agora]
