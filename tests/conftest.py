from datetime import date

import pytest

from app import create_app
from armazem import repositorio
from database import db
from paginas import fechar_listas


@pytest.fixture
def app(tmp_path):
    aplicacao = create_app({
        "TESTING": True,
        "SECRET_KEY": "teste",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'teste.db'}",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    })
    yield aplicacao
    fechar_listas(aplicacao)
    with aplicacao.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def contexto(app):
    with app.app_context():
        yield app


@pytest.fixture
def veiculo(contexto):
    return repositorio("veiculos").inserir(
        {"placa": "LD-54-32-AA", "modelo": "Corolla", "marca": "Toyota", "ano": 2019}
    )[0]


@pytest.fixture
def motoristas(contexto, veiculo):
    """Dois motoristas: o primeiro já conduz o veículo."""
    return repositorio("motoristas").inserir(
        {"nome": "João Silva", "documento": "BI987654321", "data_contratacao": date(2022, 1, 10),
         "veiculo_id": veiculo["id"]},
        {"nome": "Manuel Santos", "documento": "BI123456789", "data_contratacao": date(2022, 3, 2)},
    )
