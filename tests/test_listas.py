from armazem import ErroArmazem
from listas import CARREGADO, CARREGANDO, ControladorLista
from realtime import APAGAR, INSERIR, Alteracao, CanalAlteracoes
from recursos import MOTORISTAS


class RepositorioFalso:
    """Devolve as respostas por ordem; uma exceção na lista é lançada."""

    def __init__(self, *respostas):
        self.respostas = list(respostas)
        self.pedidos = []

    def selecionar(self, ordenar_por=None, descendente=True, **filtros):
        self.pedidos.append((ordenar_por, descendente))
        resposta = self.respostas.pop(0) if len(self.respostas) > 1 else self.respostas[0]
        if isinstance(resposta, Exception):
            raise resposta
        if callable(resposta):
            return resposta()
        return resposta


class Notificacoes:
    def __init__(self):
        self.mensagens = []

    def __call__(self, mensagem, categoria):
        self.mensagens.append((mensagem, categoria))


JOAO = {"id": 1, "nome": "João Silva"}
MANUEL = {"id": 2, "nome": "Manuel Santos"}


def test_estado_inicial_e_montagem():
    canal = CanalAlteracoes()
    repo = RepositorioFalso([JOAO])
    lista = ControladorLista(MOTORISTAS, repo, canal)
    assert lista.estado == CARREGANDO
    assert lista.linhas == []

    lista.montar()
    assert lista.estado == CARREGADO
    assert not lista.carregando
    assert lista.linhas == [JOAO]
    assert repo.pedidos == [("criado_em", True)]
    assert canal.total_subscricoes("motoristas") == 1


def test_montar_duas_vezes_subscreve_uma_vez():
    canal = CanalAlteracoes()
    lista = ControladorLista(MOTORISTAS, RepositorioFalso([]), canal)
    lista.montar()
    lista.montar()
    assert canal.total_subscricoes() == 1


def test_alteracao_sintetica_provoca_recarga():
    canal = CanalAlteracoes()
    repo = RepositorioFalso([JOAO], [MANUEL, JOAO])
    lista = ControladorLista(MOTORISTAS, repo, canal).montar()

    canal.publicar(Alteracao("motoristas", INSERIR, 2, MANUEL))
    assert lista.linhas == [MANUEL, JOAO]
    assert len(repo.pedidos) == 2


def test_alteracao_noutra_tabela_e_ignorada():
    canal = CanalAlteracoes()
    repo = RepositorioFalso([JOAO])
    ControladorLista(MOTORISTAS, repo, canal).montar()
    canal.publicar(Alteracao("veiculos", APAGAR, 5))
    assert len(repo.pedidos) == 1


def test_falha_mantem_o_ultimo_retrato():
    canal = CanalAlteracoes()
    avisos = Notificacoes()
    repo = RepositorioFalso([JOAO], ErroArmazem("ligação perdida"))
    lista = ControladorLista(MOTORISTAS, repo, canal, avisos).montar()

    assert lista.recarregar() is False
    assert lista.linhas == [JOAO]
    assert lista.estado == CARREGADO
    assert avisos.mensagens == [("Erro ao buscar motoristas: ligação perdida", "danger")]


def test_falha_na_primeira_carga_deixa_lista_vazia():
    avisos = Notificacoes()
    lista = ControladorLista(MOTORISTAS, RepositorioFalso(ErroArmazem()), CanalAlteracoes(), avisos).montar()
    assert lista.linhas == []
    assert lista.estado == CARREGADO
    assert avisos.mensagens[0][0].endswith(ErroArmazem.MENSAGEM_GENERICA)


def test_resposta_antiga_nao_substitui_a_recente():
    canal = CanalAlteracoes()
    lista = ControladorLista(MOTORISTAS, None, canal)

    def resposta_lenta():
        # Enquanto o primeiro pedido está em curso, chega uma alteração
        canal.publicar(Alteracao("motoristas", INSERIR, 2, MANUEL))
        return [JOAO]

    lista.repositorio = RepositorioFalso(resposta_lenta, [MANUEL, JOAO])
    lista.montar()
    assert lista.linhas == [MANUEL, JOAO]
    assert lista.estado == CARREGADO
    assert not lista.carregando


def test_desmontar_cancela_a_subscricao():
    canal = CanalAlteracoes()
    repo = RepositorioFalso([JOAO])
    with ControladorLista(MOTORISTAS, repo, canal) as lista:
        assert lista.montado
    assert not lista.montado
    assert canal.total_subscricoes() == 0

    canal.publicar(Alteracao("motoristas", INSERIR, 2, MANUEL))
    assert len(repo.pedidos) == 1


def test_linhas_devolve_copia():
    lista = ControladorLista(MOTORISTAS, RepositorioFalso([JOAO]), CanalAlteracoes()).montar()
    lista.linhas.append(MANUEL)
    assert lista.linhas == [JOAO]
