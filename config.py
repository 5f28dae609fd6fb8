import os
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///" + os.path.join(basedir, "taxiwise.db"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(basedir, "uploads"))
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    # 0 = segunda ... 6 = domingo (pt-BR começa a semana ao domingo)
    SEMANA_COMECA_EM = int(os.getenv("SEMANA_COMECA_EM", "6"))
    MESES_REVISAO = int(os.getenv("MESES_REVISAO", "2"))
    SSE_KEEPALIVE = float(os.getenv("SSE_KEEPALIVE", "15"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


STATUS_ATIVIDADE = ["ativo", "inativo"]

STATUS_MANUTENCAO = [
    "agendado",
    "pendente",
    "em_andamento",
    "completo",
    "atrasado",
    "cancelado",
]

# Vocabulário da revisão em inglês -> vocabulário persistido
MAPA_STATUS_MANUTENCAO = {
    "scheduled": "agendado",
    "pending": "pendente",
    "in_progress": "em_andamento",
    "completed": "completo",
    "overdue": "atrasado",
    "cancelled": "cancelado",
}

TIPOS_REPARACAO = ["preventiva", "corretiva", "inspecao"]

TIPOS_TRANSACAO = ["entrada", "saida"]

MAPA_TIPO_TRANSACAO = {
    "saída": "saida",
    "income": "entrada",
    "expense": "saida",
}

CATEGORIAS_FINANCA = [
    "manutencao",
    "reparacao",
    "salario",
    "combustivel",
    "seguro",
    "outro",
]

ROTULOS = {
    "ativo": "Ativo",
    "inativo": "Inativo",
    "agendado": "Agendado",
    "pendente": "Pendente",
    "em_andamento": "Em andamento",
    "completo": "Completo",
    "atrasado": "Atrasado",
    "cancelado": "Cancelado",
    "preventiva": "Preventiva",
    "corretiva": "Corretiva",
    "inspecao": "Inspeção",
    "entrada": "Entrada",
    "saida": "Saída",
    "manutencao": "Manutenção",
    "reparacao": "Reparação",
    "salario": "Salário",
    "combustivel": "Combustível",
    "seguro": "Seguro",
    "outro": "Outro",
}

EXTENSOES_PERMITIDAS = {"pdf", "png", "jpg", "jpeg", "webp"}
