# armazem.py
"""Acesso às tabelas da frota, no formato de linhas (dicionários).

As leituras correm numa sessão própria e curta, tal como uma ida ao servidor;
as escritas usam a sessão do pedido e confirmam logo, salvo dentro de
`transacao()`.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from database import db
from models import Financa, Manutencao, Motorista, Reparacao, Veiculo

logger = logging.getLogger(__name__)

MODELOS = {modelo.__tablename__: modelo for modelo in (Motorista, Veiculo, Manutencao, Reparacao, Financa)}


class ErroArmazem(Exception):
    MENSAGEM_GENERICA = "Erro inesperado na base de dados."

    def __init__(self, mensagem=None):
        self.mensagem = mensagem or self.MENSAGEM_GENERICA
        super().__init__(self.mensagem)

    @classmethod
    def de_excecao(cls, exc):
        origem = getattr(exc, "orig", None)
        texto = str(origem) if origem is not None else ""
        return cls(texto.strip() or None)


class RepositorioTabela:
    def __init__(self, modelo):
        self.modelo = modelo
        self._em_transacao = False

    @property
    def tabela(self):
        return self.modelo.__tablename__

    def _coluna(self, campo):
        if campo not in self.modelo.__table__.columns:
            raise ErroArmazem(f"Coluna desconhecida em {self.tabela}: {campo}")
        return getattr(self.modelo, campo)

    # --- LEITURAS ---
    def selecionar(self, ordenar_por=None, descendente=True, **filtros):
        consulta = select(self.modelo).options(
            *[joinedload(getattr(self.modelo, nome)) for nome in self.modelo._juncoes]
        )
        for campo, valor in filtros.items():
            consulta = consulta.where(self._coluna(campo) == valor)
        if ordenar_por:
            coluna = self._coluna(ordenar_por)
            consulta = consulta.order_by(coluna.desc() if descendente else coluna.asc())
        try:
            with Session(db.engine) as sessao:
                return [obj.para_dict() for obj in sessao.scalars(consulta).unique()]
        except SQLAlchemyError as exc:
            logger.error("Erro ao consultar %s: %s", self.tabela, exc)
            raise ErroArmazem.de_excecao(exc) from exc

    def obter(self, registro_id):
        linhas = self.selecionar(id=registro_id)
        return linhas[0] if linhas else None

    # --- ESCRITAS ---
    def inserir(self, *linhas):
        objetos = [self.modelo(**linha) for linha in linhas]
        db.session.add_all(objetos)
        self._confirmar()
        return [obj.para_dict(com_juncoes=False) for obj in objetos]

    def atualizar(self, registro_id, dados):
        obj = self._carregar(registro_id)
        for campo, valor in dados.items():
            self._coluna(campo)
            setattr(obj, campo, valor)
        self._confirmar()
        return obj.para_dict(com_juncoes=False)

    def atualizar_onde(self, filtros, dados):
        try:
            consulta = db.session.query(self.modelo).filter_by(**filtros)
            objetos = consulta.all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ErroArmazem.de_excecao(exc) from exc
        for obj in objetos:
            for campo, valor in dados.items():
                setattr(obj, campo, valor)
        self._confirmar()
        return [obj.id for obj in objetos]

    def apagar(self, registro_id):
        obj = self._carregar(registro_id)
        db.session.delete(obj)
        self._confirmar()

    def _carregar(self, registro_id):
        try:
            obj = db.session.get(self.modelo, registro_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ErroArmazem.de_excecao(exc) from exc
        if obj is None:
            raise ErroArmazem("Registo não encontrado.")
        return obj

    def _confirmar(self):
        try:
            if self._em_transacao:
                db.session.flush()
            else:
                db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Erro ao gravar em %s: %s", self.tabela, exc)
            raise ErroArmazem.de_excecao(exc) from exc

    @contextmanager
    def transacao(self):
        """Agrupa várias escritas num único commit."""
        self._em_transacao = True
        try:
            yield self
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ErroArmazem.de_excecao(exc) from exc
        except Exception:
            db.session.rollback()
            raise
        finally:
            self._em_transacao = False


def repositorio(tabela):
    return RepositorioTabela(MODELOS[tabela])
