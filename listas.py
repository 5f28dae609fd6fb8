# listas.py
"""Espelho em memória de uma tabela para um ecrã.

Estados: CARREGANDO (início e durante cada recarga) -> CARREGADO.
Qualquer alteração na tabela provoca uma recarga completa, incluindo as
alterações feitas pelo próprio ecrã. Uma falha de leitura mantém o último
retrato carregado.
"""
import logging
import threading

from armazem import ErroArmazem

logger = logging.getLogger(__name__)

CARREGANDO = "carregando"
CARREGADO = "carregado"


class ControladorLista:
    def __init__(self, recurso, repositorio, canal, notificar=None):
        self.recurso = recurso
        self.repositorio = repositorio
        self.canal = canal
        self.notificar = notificar or (lambda mensagem, categoria: None)
        self.estado = CARREGANDO
        self.carregando = False
        self._linhas = []
        self._subscricao = None
        self._lock = threading.Lock()
        self._pedido = 0      # último número de pedido emitido
        self._aplicado = 0    # número do pedido cujo resultado está em _linhas

    @property
    def linhas(self):
        with self._lock:
            return list(self._linhas)

    @property
    def montado(self):
        return self._subscricao is not None and self._subscricao.ativa

    def montar(self):
        if self.montado:
            return self
        self._subscricao = self.canal.ao_alterar(self.recurso.tabela, self._ao_alterar)
        self.recarregar()
        return self

    def desmontar(self):
        if self._subscricao is not None:
            self._subscricao.cancelar()
            self._subscricao = None

    def __enter__(self):
        return self.montar()

    def __exit__(self, *exc_info):
        self.desmontar()

    def _ao_alterar(self, alteracao):
        logger.debug("%s: %r, a recarregar", self.recurso.tabela, alteracao)
        self.recarregar()

    def recarregar(self):
        with self._lock:
            self._pedido += 1
            pedido = self._pedido
            self.estado = CARREGANDO
            self.carregando = True
        try:
            linhas = self.repositorio.selecionar(ordenar_por=self.recurso.campo_ordem, descendente=True)
        except ErroArmazem as exc:
            logger.error("Erro ao buscar %s: %s", self.recurso.tabela, exc)
            self.notificar(f"Erro ao buscar {self.recurso.titulo.lower()}: {exc.mensagem}", "danger")
            return False
        else:
            with self._lock:
                # Respostas fora de ordem: só vale a de um pedido mais recente
                if pedido > self._aplicado:
                    self._linhas = linhas
                    self._aplicado = pedido
            return True
        finally:
            with self._lock:
                if pedido == self._pedido:
                    self.carregando = False
                    self.estado = CARREGADO
