# realtime.py
"""Canal de alterações: notificações por tabela sempre que uma linha muda.

As alterações são recolhidas pelos eventos de sessão do SQLAlchemy durante o
flush e só são publicadas depois do commit. Um rollback descarta-as.
O canal não conhece o armazém: os testes podem publicar eventos sintéticos.
"""
import json
import logging
import queue
import threading

from flask import current_app, has_app_context
from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

INSERIR = "INSERT"
ATUALIZAR = "UPDATE"
APAGAR = "DELETE"
TODAS = "*"

CHAVE_PENDENTES = "alteracoes_pendentes"


class Alteracao:
    def __init__(self, tabela, evento, registro_id=None, dados=None):
        self.tabela = tabela
        self.evento = evento
        self.registro_id = registro_id
        self.dados = dados

    def resumo(self):
        return {"tabela": self.tabela, "evento": self.evento, "id": self.registro_id}

    def __repr__(self):
        return f"<Alteracao {self.evento} {self.tabela}#{self.registro_id}>"


class Subscricao:
    def __init__(self, canal, tabela, handler):
        self._canal = canal
        self.tabela = tabela
        self.handler = handler
        self.ativa = True

    def cancelar(self):
        if self.ativa:
            self._canal._remover(self)
            self.ativa = False


class CanalAlteracoes:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscricoes = {}

    def ao_alterar(self, tabela, handler):
        """Regista `handler(alteracao)` para a tabela (ou '*' para todas)."""
        subscricao = Subscricao(self, tabela, handler)
        with self._lock:
            self._subscricoes.setdefault(tabela, []).append(subscricao)
        logger.debug("Subscrição aberta em %s", tabela)
        return subscricao

    def _remover(self, subscricao):
        with self._lock:
            lista = self._subscricoes.get(subscricao.tabela, [])
            if subscricao in lista:
                lista.remove(subscricao)
        logger.debug("Subscrição fechada em %s", subscricao.tabela)

    def total_subscricoes(self, tabela=None):
        with self._lock:
            if tabela is not None:
                return len(self._subscricoes.get(tabela, []))
            return sum(len(lista) for lista in self._subscricoes.values())

    def publicar(self, alteracao):
        with self._lock:
            destinatarios = list(self._subscricoes.get(alteracao.tabela, []))
            destinatarios += self._subscricoes.get(TODAS, [])
        for subscricao in destinatarios:
            try:
                subscricao.handler(alteracao)
            except Exception:
                # Um ecrã com problemas não pode bloquear o commit de outro
                logger.exception("Erro ao entregar %r", alteracao)


def canal_atual():
    if not has_app_context():
        return None
    return current_app.extensions.get("canal_alteracoes")


# --- LIGAÇÃO AOS EVENTOS DE SESSÃO ---
def _descrever(obj, evento):
    tabela = getattr(obj, "__tablename__", None)
    if tabela is None:
        return None
    registro_id = getattr(obj, "id", None)
    if evento == APAGAR or not hasattr(obj, "para_dict"):
        return Alteracao(tabela, evento, registro_id, {"id": registro_id})
    return Alteracao(tabela, evento, registro_id, obj.para_dict(com_juncoes=False))


@event.listens_for(Session, "after_flush")
def _recolher_alteracoes(sessao, contexto_flush):
    pendentes = sessao.info.setdefault(CHAVE_PENDENTES, [])
    for obj in sessao.new:
        pendentes.append(_descrever(obj, INSERIR))
    for obj in sessao.dirty:
        if sessao.is_modified(obj, include_collections=False):
            pendentes.append(_descrever(obj, ATUALIZAR))
    for obj in sessao.deleted:
        pendentes.append(_descrever(obj, APAGAR))


@event.listens_for(Session, "after_commit")
def _publicar_alteracoes(sessao):
    pendentes = [a for a in sessao.info.pop(CHAVE_PENDENTES, []) if a is not None]
    canal = canal_atual()
    if canal is None or not pendentes:
        return
    for alteracao in pendentes:
        canal.publicar(alteracao)


@event.listens_for(Session, "after_rollback")
def _descartar_alteracoes(sessao):
    sessao.info.pop(CHAVE_PENDENTES, None)


# --- SERVER-SENT EVENTS ---
def fluxo_eventos(canal, tabela, keepalive=15.0):
    """Gerador SSE: uma mensagem por alteração enquanto o cliente estiver ligado."""
    fila = queue.Queue()
    subscricao = canal.ao_alterar(tabela, fila.put)
    try:
        yield "retry: 3000\n\n"
        while True:
            try:
                alteracao = fila.get(timeout=keepalive)
            except queue.Empty:
                yield ": keepalive\n\n"
                continue
            yield f"event: alteracao\ndata: {json.dumps(alteracao.resumo())}\n\n"
    finally:
        subscricao.cancelar()
