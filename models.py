# models.py
from datetime import datetime

from database import db  # Importa o objeto 'db' partilhado


# --- BASE COMUM ---
class RegistroMixin:
    """Colunas de auditoria e serialização comuns a todas as tabelas."""

    id = db.Column(db.Integer, primary_key=True)
    criado_em = db.Column(db.DateTime, default=datetime.now, nullable=False)
    atualizado_em = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # Relações embutidas na linha serializada (equivalente ao select('*, veiculos(*)'))
    _juncoes = ()

    def para_dict(self, com_juncoes=True):
        linha = {coluna.name: getattr(self, coluna.name) for coluna in self.__table__.columns}
        if com_juncoes:
            for nome in self._juncoes:
                relacionado = getattr(self, nome)
                linha[nome] = relacionado.para_dict(com_juncoes=False) if relacionado is not None else None
        return linha

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}>"


# --- MODELOS ---
class Veiculo(RegistroMixin, db.Model):
    __tablename__ = "veiculos"
    placa = db.Column(db.String(15), nullable=False)  # única na frota, mas não imposta
    modelo = db.Column(db.String(100), nullable=False)
    marca = db.Column(db.String(60), nullable=True)
    ano = db.Column(db.Integer, nullable=True)
    quilometragem = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="ativo")


class Motorista(RegistroMixin, db.Model):
    __tablename__ = "motoristas"
    nome = db.Column(db.String(150), nullable=False)
    documento = db.Column(db.String(40), nullable=False)
    endereco = db.Column(db.String(200), nullable=True)
    telefone = db.Column(db.String(30), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="ativo")
    data_contratacao = db.Column(db.Date, nullable=False)
    documento_bi_url = db.Column(db.String(300), nullable=True)
    documento_carta_url = db.Column(db.String(300), nullable=True)
    veiculo_id = db.Column(db.Integer, db.ForeignKey("veiculos.id", ondelete="SET NULL"), nullable=True, index=True)

    veiculo = db.relationship("Veiculo")
    _juncoes = ("veiculo",)


class Manutencao(RegistroMixin, db.Model):
    __tablename__ = "manutencoes"
    veiculo_id = db.Column(db.Integer, db.ForeignKey("veiculos.id"), nullable=False, index=True)
    data_manutencao = db.Column(db.DateTime, nullable=False)
    descricao = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="agendado")
    custo = db.Column(db.Numeric(14, 2), nullable=True)
    notas = db.Column(db.Text, nullable=True)

    veiculo = db.relationship("Veiculo")
    _juncoes = ("veiculo",)


class Reparacao(RegistroMixin, db.Model):
    __tablename__ = "reparacoes"
    veiculo_id = db.Column(db.Integer, db.ForeignKey("veiculos.id"), nullable=False, index=True)
    manutencao_id = db.Column(db.Integer, db.ForeignKey("manutencoes.id", ondelete="SET NULL"), nullable=True)
    data_reparacao = db.Column(db.DateTime, nullable=False)
    peca_substituida = db.Column(db.String(200), nullable=True)
    preco = db.Column(db.Numeric(14, 2), nullable=False)
    descricao = db.Column(db.Text, nullable=False)
    tipo = db.Column(db.String(20), nullable=True)
    status = db.Column(db.String(20), nullable=True)
    oficina = db.Column(db.String(120), nullable=True)
    recibo_url = db.Column(db.String(300), nullable=True)

    veiculo = db.relationship("Veiculo")
    _juncoes = ("veiculo",)


class Financa(RegistroMixin, db.Model):
    __tablename__ = "financas"
    tipo = db.Column(db.String(10), nullable=False)  # entrada / saida
    categoria = db.Column(db.String(30), nullable=False)
    descricao = db.Column(db.String(200), nullable=False)
    valor = db.Column(db.Numeric(14, 2), nullable=False)  # sempre positivo; o sinal vem do tipo
    data_transacao = db.Column(db.DateTime, nullable=False, default=datetime.now)
    recibo_url = db.Column(db.String(300), nullable=True)
    recibo_nome = db.Column(db.String(200), nullable=True)
    veiculo_id = db.Column(db.Integer, db.ForeignKey("veiculos.id", ondelete="SET NULL"), nullable=True)
    motorista_id = db.Column(db.Integer, db.ForeignKey("motoristas.id", ondelete="SET NULL"), nullable=True)
    reparacao_id = db.Column(db.Integer, db.ForeignKey("reparacoes.id", ondelete="SET NULL"), nullable=True)

    veiculo = db.relationship("Veiculo")
    motorista = db.relationship("Motorista")
    _juncoes = ("veiculo", "motorista")
