# ficheiros.py
import logging
import os
from datetime import datetime

from werkzeug.utils import secure_filename

from config import EXTENSOES_PERMITIDAS

logger = logging.getLogger(__name__)


class ErroFicheiro(Exception):
    pass


def extensao_permitida(nome):
    return '.' in nome and nome.rsplit('.', 1)[1].lower() in EXTENSOES_PERMITIDAS


class ArmazemFicheiros:
    """Buckets como subpastas de UPLOAD_FOLDER, servidos em /ficheiros/<bucket>/<nome>."""

    def __init__(self, pasta_base, gerar_url):
        self.pasta_base = pasta_base
        self.gerar_url = gerar_url  # (bucket, nome) -> URL pública

    def enviar(self, bucket, ficheiro, caminho=None):
        nome_original = ficheiro.filename or ''
        if not nome_original or not extensao_permitida(nome_original):
            raise ErroFicheiro(f"Tipo de ficheiro não permitido: {nome_original or '(vazio)'}")
        nome = secure_filename(caminho or nome_original)
        nome = datetime.now().strftime('%Y%m%d_%H%M%S_') + nome

        pasta = os.path.join(self.pasta_base, secure_filename(bucket))
        os.makedirs(pasta, exist_ok=True)
        ficheiro.save(os.path.join(pasta, nome))
        logger.info("Ficheiro guardado em %s/%s", bucket, nome)
        return self.gerar_url(bucket, nome), nome_original

    def pasta(self, bucket):
        return os.path.join(self.pasta_base, secure_filename(bucket))
