# filtros.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from datas import mesmo_dia


@dataclass
class EstadoFiltro:
    consulta: str = ""
    status: Optional[str] = None
    data: Optional[date] = None
    # Filtros de aba/categoria (igualdade campo == valor)
    secundarios: dict = field(default_factory=dict)

    @property
    def ativo(self) -> bool:
        return bool(self.consulta or self.status or self.data or self.secundarios)


def valor_caminho(linha: dict, caminho: str):
    """Lê 'veiculo.placa' de uma linha com junções; devolve None se faltar um elo."""
    atual = linha
    for parte in caminho.split("."):
        if not isinstance(atual, dict):
            return None
        atual = atual.get(parte)
    return atual


def texto_pesquisa(linha: dict, campos) -> str:
    return " ".join(str(v) for v in (valor_caminho(linha, c) for c in campos) if v is not None)


def corresponde(linha: dict, estado: EstadoFiltro, recurso) -> bool:
    if estado.consulta:
        if estado.consulta.lower() not in texto_pesquisa(linha, recurso.campos_texto).lower():
            return False

    if estado.status and linha.get("status") != estado.status:
        return False

    # Com data escolhida, a data decide sozinha: abas e categorias são ignoradas
    if estado.data is not None:
        return mesmo_dia(valor_caminho(linha, recurso.campo_data), estado.data)

    for campo, valor in estado.secundarios.items():
        if valor_caminho(linha, campo) != valor:
            return False
    return True


def filtrar(linhas, estado: EstadoFiltro, recurso) -> list:
    return [linha for linha in linhas if corresponde(linha, estado, recurso)]
