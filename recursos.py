# recursos.py
"""Descrição de cada entidade: tabela, pesquisa, formulário e abas.

Um único controlador, filtro, editor e conjunto de páginas são instanciados
uma vez por Recurso.
"""
from classificacao import normalizar_status
from config import (
    CATEGORIAS_FINANCA,
    STATUS_ATIVIDADE,
    STATUS_MANUTENCAO,
    TIPOS_REPARACAO,
    TIPOS_TRANSACAO,
)
from financas import normalizar_tipo
from models import Financa, Manutencao, Motorista, Reparacao, Veiculo


class Campo:
    def __init__(self, nome, rotulo, tipo="texto", obrigatorio=False, opcoes=None,
                 normalizar=None, bucket=None, coluna_nome=None):
        self.nome = nome
        self.rotulo = rotulo
        self.tipo = tipo  # texto, textarea, data, decimal, inteiro, escolha, veiculo, motorista, manutencao, ficheiro
        self.obrigatorio = obrigatorio
        self.opcoes = opcoes or []
        self.normalizar = normalizar
        self.bucket = bucket
        self.coluna_nome = coluna_nome  # ficheiros: coluna que guarda o nome original


class Coluna:
    def __init__(self, rotulo, chave, formato=None):
        self.rotulo = rotulo
        self.chave = chave
        self.formato = formato  # data, dinheiro, status, veiculo


class Recurso:
    def __init__(self, nome, modelo, titulo, singular, campos_texto, campo_data, campo_ordem,
                 campos, colunas, status=None, abas=None, filtro_secundario=None, mensagem_vazia=""):
        self.nome = nome
        self.modelo = modelo
        self.titulo = titulo
        self.singular = singular
        self.campos_texto = campos_texto
        self.campo_data = campo_data
        self.campo_ordem = campo_ordem
        self.campos = campos
        self.colunas = colunas
        self.status = status or []
        self.abas = abas or {}
        self.filtro_secundario = filtro_secundario  # (campo, rotulo, opcoes) para um seletor extra
        self.mensagem_vazia = mensagem_vazia

    @property
    def tabela(self):
        return self.modelo.__tablename__

    @property
    def obrigatorios(self):
        return [c.nome for c in self.campos if c.obrigatorio]

    @property
    def colunas_persistidas(self):
        return set(self.modelo.__table__.columns.keys())

    def campo(self, nome):
        for campo in self.campos:
            if campo.nome == nome:
                return campo
        return None


MOTORISTAS = Recurso(
    nome="motoristas",
    modelo=Motorista,
    titulo="Motoristas",
    singular="Motorista",
    campos_texto=["nome", "documento"],
    campo_data="data_contratacao",
    campo_ordem="criado_em",
    campos=[
        Campo("nome", "Nome", obrigatorio=True),
        Campo("documento", "Nº do documento (BI)", obrigatorio=True),
        Campo("endereco", "Endereço"),
        Campo("telefone", "Telefone"),
        Campo("status", "Status", "escolha", obrigatorio=True, opcoes=STATUS_ATIVIDADE),
        Campo("data_contratacao", "Data de contratação", "data", obrigatorio=True),
        Campo("documento_bi_url", "Bilhete de identidade", "ficheiro", bucket="documentos"),
        Campo("documento_carta_url", "Carta de condução", "ficheiro", bucket="documentos"),
    ],
    colunas=[
        Coluna("Nome", "nome"),
        Coluna("Documento", "documento"),
        Coluna("Telefone", "telefone"),
        Coluna("Veículo", "veiculo", "veiculo"),
        Coluna("Contratação", "data_contratacao", "data"),
        Coluna("Status", "status", "status"),
    ],
    status=STATUS_ATIVIDADE,
    mensagem_vazia="Registe o primeiro motorista para começar.",
)

VEICULOS = Recurso(
    nome="veiculos",
    modelo=Veiculo,
    titulo="Veículos",
    singular="Veículo",
    campos_texto=["modelo", "placa"],
    campo_data="criado_em",
    campo_ordem="criado_em",
    campos=[
        Campo("placa", "Matrícula", obrigatorio=True, normalizar=lambda v: v.upper()),
        Campo("modelo", "Modelo", obrigatorio=True),
        Campo("marca", "Marca"),
        Campo("ano", "Ano", "inteiro"),
        Campo("quilometragem", "Quilometragem", "inteiro"),
        Campo("status", "Status", "escolha", obrigatorio=True, opcoes=STATUS_ATIVIDADE),
    ],
    colunas=[
        Coluna("Matrícula", "placa"),
        Coluna("Modelo", "modelo"),
        Coluna("Marca", "marca"),
        Coluna("Ano", "ano"),
        Coluna("Status", "status", "status"),
    ],
    status=STATUS_ATIVIDADE,
    mensagem_vazia="Registe o primeiro veículo da frota.",
)

MANUTENCOES = Recurso(
    nome="manutencoes",
    modelo=Manutencao,
    titulo="Manutenções",
    singular="Manutenção",
    campos_texto=["veiculo.modelo", "veiculo.placa", "descricao"],
    campo_data="data_manutencao",
    campo_ordem="data_manutencao",
    campos=[
        Campo("veiculo_id", "Veículo", "veiculo", obrigatorio=True),
        Campo("data_manutencao", "Data", "data", obrigatorio=True),
        Campo("descricao", "Descrição", "textarea", obrigatorio=True),
        Campo("status", "Status", "escolha", obrigatorio=True, opcoes=STATUS_MANUTENCAO,
              normalizar=normalizar_status),
        Campo("custo", "Custo", "decimal"),
        Campo("notas", "Notas", "textarea"),
    ],
    colunas=[
        Coluna("Veículo", "veiculo", "veiculo"),
        Coluna("Data", "data_manutencao", "data"),
        Coluna("Descrição", "descricao"),
        Coluna("Custo", "custo", "dinheiro"),
        Coluna("Status", "status", "status"),
    ],
    status=STATUS_MANUTENCAO,
    abas={
        "todas": ("Todas", {}),
        "agendadas": ("Agendadas", {"status": "agendado"}),
        "completas": ("Completas", {"status": "completo"}),
        "atrasadas": ("Atrasadas", {"status": "atrasado"}),
    },
    mensagem_vazia="Agende a primeira manutenção para começar.",
)

REPARACOES = Recurso(
    nome="reparacoes",
    modelo=Reparacao,
    titulo="Reparações",
    singular="Reparação",
    campos_texto=["veiculo.modelo", "veiculo.placa", "descricao"],
    campo_data="data_reparacao",
    campo_ordem="data_reparacao",
    campos=[
        Campo("veiculo_id", "Veículo", "veiculo", obrigatorio=True),
        Campo("manutencao_id", "Manutenção associada", "manutencao"),
        Campo("data_reparacao", "Data", "data", obrigatorio=True),
        Campo("peca_substituida", "Peça substituída"),
        Campo("preco", "Preço", "decimal", obrigatorio=True),
        Campo("descricao", "Descrição", "textarea", obrigatorio=True),
        Campo("tipo", "Tipo", "escolha", opcoes=TIPOS_REPARACAO),
        Campo("status", "Status", "escolha", opcoes=STATUS_MANUTENCAO, normalizar=normalizar_status),
        Campo("oficina", "Oficina"),
        Campo("recibo_url", "Recibo", "ficheiro", bucket="recibos"),
    ],
    colunas=[
        Coluna("Veículo", "veiculo", "veiculo"),
        Coluna("Data", "data_reparacao", "data"),
        Coluna("Peça", "peca_substituida"),
        Coluna("Descrição", "descricao"),
        Coluna("Preço", "preco", "dinheiro"),
        Coluna("Tipo", "tipo", "status"),
    ],
    status=STATUS_MANUTENCAO,
    abas={
        "todas": ("Todas", {}),
        "preventivas": ("Preventivas", {"tipo": "preventiva"}),
        "corretivas": ("Corretivas", {"tipo": "corretiva"}),
        "inspecoes": ("Inspeções", {"tipo": "inspecao"}),
    },
    mensagem_vazia="Registe a primeira reparação.",
)

FINANCAS = Recurso(
    nome="financas",
    modelo=Financa,
    titulo="Finanças",
    singular="Transação",
    campos_texto=["descricao"],
    campo_data="data_transacao",
    campo_ordem="data_transacao",
    campos=[
        Campo("tipo", "Tipo", "escolha", obrigatorio=True, opcoes=TIPOS_TRANSACAO, normalizar=normalizar_tipo),
        Campo("categoria", "Categoria", "escolha", obrigatorio=True, opcoes=CATEGORIAS_FINANCA),
        Campo("descricao", "Descrição", obrigatorio=True),
        Campo("valor", "Valor", "decimal", obrigatorio=True),
        Campo("data_transacao", "Data", "data", obrigatorio=True),
        Campo("veiculo_id", "Veículo", "veiculo"),
        Campo("motorista_id", "Motorista", "motorista"),
        Campo("recibo_url", "Recibo", "ficheiro", bucket="recibos", coluna_nome="recibo_nome"),
    ],
    colunas=[
        Coluna("Data", "data_transacao", "data"),
        Coluna("Descrição", "descricao"),
        Coluna("Categoria", "categoria", "status"),
        Coluna("Tipo", "tipo", "status"),
        Coluna("Valor", "valor", "dinheiro"),
    ],
    abas={
        "todas": ("Todas", {}),
        "entradas": ("Entradas", {"tipo": "entrada"}),
        "saidas": ("Saídas", {"tipo": "saida"}),
    },
    filtro_secundario=("categoria", "Categoria", CATEGORIAS_FINANCA),
    mensagem_vazia="Registe a primeira transação.",
)

RECURSOS = {r.nome: r for r in (MOTORISTAS, VEICULOS, MANUTENCOES, REPARACOES, FINANCAS)}
