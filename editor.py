# editor.py
"""Criação, edição e eliminação de registos a partir de um rascunho de formulário."""
import logging
from decimal import Decimal, InvalidOperation

from armazem import ErroArmazem
from datas import parse_data, para_datetime
from database import db

logger = logging.getLogger(__name__)

CRIAR = "criar"
EDITAR = "editar"


class ErroValidacao(Exception):
    def __init__(self, erros):
        self.erros = erros  # campo -> mensagem
        super().__init__(" ".join(erros.values()))


class Resultado:
    def __init__(self, sucesso, mensagem, registro=None):
        self.sucesso = sucesso
        self.mensagem = mensagem
        self.registro = registro

    def __bool__(self):
        return self.sucesso

    def __repr__(self):
        return f"<Resultado {self.sucesso} {self.mensagem!r}>"


def converter_valor(recurso, campo, bruto):
    if isinstance(bruto, str):
        bruto = bruto.strip()
    if bruto is None or bruto == "":
        return None
    if campo.tipo == "data":
        valor = parse_data(bruto) if isinstance(bruto, str) else bruto
        if isinstance(recurso.modelo.__table__.columns[campo.nome].type, db.DateTime):
            valor = para_datetime(valor)
        return valor
    if campo.tipo == "decimal":
        valor = Decimal(str(bruto).replace(",", "."))
        if not valor.is_finite():
            raise ValueError(bruto)  # NaN e Infinity
        return valor
    if campo.tipo in ("inteiro", "veiculo", "motorista", "manutencao"):
        return int(bruto)
    if campo.normalizar is not None:
        bruto = campo.normalizar(bruto)
    if campo.tipo == "escolha" and campo.opcoes and bruto not in campo.opcoes:
        raise ValueError(bruto)
    return bruto


class EditorRegistro:
    def __init__(self, recurso, repositorio):
        self.recurso = recurso
        self.repositorio = repositorio

    def preparar(self, rascunho):
        """Converte e valida o rascunho; devolve só colunas persistidas."""
        colunas = self.recurso.colunas_persistidas
        erros = {}
        dados = {}
        for campo in self.recurso.campos:
            try:
                valor = converter_valor(self.recurso, campo, rascunho.get(campo.nome))
            except (ValueError, TypeError, InvalidOperation):
                erros[campo.nome] = f"{campo.rotulo}: valor inválido."
                continue
            if valor is None and campo.obrigatorio:
                erros[campo.nome] = f"{campo.rotulo} é obrigatório."
                continue
            if campo.tipo == "decimal" and valor is not None and valor < 0:
                erros[campo.nome] = f"{campo.rotulo} não pode ser negativo."
                continue
            if campo.nome in colunas:
                dados[campo.nome] = valor
            if campo.coluna_nome and campo.coluna_nome in colunas:
                dados[campo.coluna_nome] = rascunho.get(campo.coluna_nome) or None
        if erros:
            raise ErroValidacao(erros)
        return dados

    def submeter(self, rascunho, modo):
        dados = self.preparar(rascunho)
        try:
            if modo == CRIAR:
                registro = self.repositorio.inserir(dados)[0]
                mensagem = f"{self.recurso.singular}: registo criado com sucesso!"
            elif modo == EDITAR:
                registro_id = rascunho.get("id")
                if not registro_id:
                    raise ErroValidacao({"id": "Registo sem identificador."})
                registro = self.repositorio.atualizar(int(registro_id), dados)
                mensagem = f"{self.recurso.singular}: registo atualizado com sucesso!"
            else:
                raise ValueError(f"Modo desconhecido: {modo}")
        except ErroArmazem as exc:
            logger.error("Erro ao guardar em %s: %s", self.recurso.tabela, exc)
            return Resultado(False, f"Erro ao guardar {self.recurso.singular.lower()}: {exc.mensagem}")
        logger.info("%s %s #%s", self.recurso.tabela, modo, registro.get("id"))
        return Resultado(True, mensagem, registro)

    def apagar(self, registro_id, confirmado=False):
        if not confirmado:
            return Resultado(False, "Eliminação não confirmada.")
        try:
            self.repositorio.apagar(int(registro_id))
        except ErroArmazem as exc:
            logger.error("Erro ao apagar %s #%s: %s", self.recurso.tabela, registro_id, exc)
            return Resultado(False, f"Erro ao apagar {self.recurso.singular.lower()}: {exc.mensagem}")
        logger.info("%s apagado #%s", self.recurso.tabela, registro_id)
        return Resultado(True, f"{self.recurso.singular}: registo apagado.")


def atribuir_motorista(motoristas, veiculo_id, motorista_id=None, transacional=True):
    """Liberta o motorista atual do veículo e atribui o novo, por esta ordem.

    Sem transação, entre os dois passos o veículo fica sem motorista gravado.
    """
    def passos():
        motoristas.atualizar_onde({"veiculo_id": veiculo_id}, {"veiculo_id": None})
        if motorista_id is not None:
            motoristas.atualizar(motorista_id, {"veiculo_id": veiculo_id})

    try:
        if transacional:
            with motoristas.transacao():
                passos()
        else:
            passos()
    except ErroArmazem as exc:
        logger.error("Erro ao atribuir motorista %s ao veículo %s: %s", motorista_id, veiculo_id, exc)
        return Resultado(False, f"Erro ao atribuir motorista: {exc.mensagem}")
    if motorista_id is None:
        return Resultado(True, "Veículo sem motorista atribuído.")
    return Resultado(True, "Motorista atribuído com sucesso!")


def marcar_completa(manutencoes, registro_id):
    try:
        manutencoes.atualizar(int(registro_id), {"status": "completo"})
    except ErroArmazem as exc:
        logger.error("Erro ao atualizar status da manutenção %s: %s", registro_id, exc)
        return Resultado(False, f"Erro ao atualizar status: {exc.mensagem}")
    logger.info("manutencoes completa #%s", registro_id)
    return Resultado(True, "Manutenção marcada como completa!")
