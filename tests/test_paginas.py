import io
import os
from datetime import datetime
from decimal import Decimal

import app as aplicacao
from armazem import repositorio
from database import db
from paginas import fechar_listas


def texto(resposta):
    return resposta.get_data(as_text=True)


def criar_veiculo(client, placa="ld-54-32-aa", modelo="Corolla"):
    return client.post("/veiculos/novo", data={"placa": placa, "modelo": modelo, "marca": "Toyota",
                                               "ano": "2019", "status": "ativo"}, follow_redirects=True)


def test_painel_vazio(client):
    resposta = client.get("/")
    assert resposta.status_code == 200
    assert "Painel" in texto(resposta)
    assert "Toda a frota está em dia." in texto(resposta)


def test_lista_vazia_mostra_mensagem(client):
    resposta = client.get("/veiculos/")
    assert resposta.status_code == 200
    assert "Registe o primeiro veículo da frota." in texto(resposta)


def test_criar_veiculo_atualiza_a_lista(client):
    # A lista já está montada antes da escrita; a alteração chega pelo canal
    client.get("/veiculos/")
    resposta = criar_veiculo(client)
    assert resposta.status_code == 200
    pagina = texto(resposta)
    assert "Veículo: registo criado com sucesso!" in pagina
    assert "LD-54-32-AA" in pagina
    assert "Precisa de revisão" in pagina


def test_formulario_invalido_fica_aberto(client):
    resposta = client.post("/motoristas/novo", data={"nome": "", "documento": "BI1", "status": "ativo",
                                                     "data_contratacao": "2023-02-01"})
    assert resposta.status_code == 400
    assert "Nome é obrigatório." in texto(resposta)
    assert 'value="BI1"' in texto(resposta)


def test_filtros_na_lista(client):
    criar_veiculo(client)
    criar_veiculo(client, "ld-65-43-bb", "Civic")
    pagina = texto(client.get("/veiculos/?q=civic"))
    assert "LD-65-43-BB" in pagina
    assert "LD-54-32-AA" not in pagina
    assert "1 de 2 registo(s)." in pagina

    pagina = texto(client.get("/veiculos/?q=inexistente"))
    assert "Tente ajustar os filtros para ver mais resultados." in pagina


def test_data_de_filtro_invalida(client):
    resposta = client.get("/financas/?data=ontem")
    assert resposta.status_code == 200
    assert "Data de filtro inválida." in texto(resposta)


def test_editar_veiculo(client):
    criar_veiculo(client)
    assert "LD-54-32-AA" in texto(client.get("/veiculos/1/editar"))
    resposta = client.post("/veiculos/1/editar", data={"placa": "LD-54-32-AA", "modelo": "Corolla Cross",
                                                        "status": "inativo"}, follow_redirects=True)
    assert "Veículo: registo atualizado com sucesso!" in texto(resposta)
    assert "Corolla Cross" in texto(resposta)


def test_editar_registo_inexistente(client):
    resposta = client.get("/motoristas/42/editar", follow_redirects=True)
    assert "Motorista não encontrado(a)." in texto(resposta)


def test_apagar_com_confirmacao(client):
    criar_veiculo(client)
    assert "Esta ação não pode ser desfeita." in texto(client.get("/veiculos/1/apagar"))

    resposta = client.post("/veiculos/1/apagar", follow_redirects=True)
    assert "Eliminação não confirmada." in texto(resposta)
    assert "LD-54-32-AA" in texto(resposta)

    resposta = client.post("/veiculos/1/apagar", data={"confirmar": "sim"}, follow_redirects=True)
    assert "Veículo: registo apagado." in texto(resposta)
    assert "LD-54-32-AA" not in texto(resposta)


def test_atribuir_motorista(client, app):
    criar_veiculo(client)
    for nome, documento in (("João Silva", "BI1"), ("Manuel Santos", "BI2")):
        client.post("/motoristas/novo", data={"nome": nome, "documento": documento, "status": "ativo",
                                              "data_contratacao": "2023-01-01"})

    assert "Sem motorista" in texto(client.get("/veiculos/1/motorista"))
    client.post("/veiculos/1/motorista", data={"motorista_id": "1"})
    resposta = client.post("/veiculos/1/motorista", data={"motorista_id": "2"}, follow_redirects=True)
    assert "Motorista atribuído com sucesso!" in texto(resposta)
    assert "Manuel Santos" in texto(resposta)

    with app.app_context():
        linhas = {m["id"]: m["veiculo_id"] for m in repositorio("motoristas").selecionar()}
    assert linhas == {1: None, 2: 1}


def test_transacao_com_recibo(client, app):
    resposta = client.post("/financas/novo", data={
        "tipo": "saida", "categoria": "combustivel", "descricao": "Gasóleo", "valor": "45000",
        "data_transacao": "2023-06-10",
        "recibo_url__ficheiro": (io.BytesIO(b"%PDF-1.4 recibo"), "recibo junho.pdf"),
    }, content_type="multipart/form-data", follow_redirects=True)
    assert "Transação: registo criado com sucesso!" in texto(resposta)

    with app.app_context():
        transacao = repositorio("financas").obter(1)
    assert transacao["valor"] == Decimal("45000")
    assert transacao["recibo_nome"] == "recibo junho.pdf"
    nome = transacao["recibo_url"].rsplit("/", 1)[1]
    assert nome.endswith("recibo_junho.pdf")
    assert os.path.exists(os.path.join(app.config["UPLOAD_FOLDER"], "recibos", nome))
    assert client.get(transacao["recibo_url"]).data == b"%PDF-1.4 recibo"


def test_recibo_com_extensao_proibida(client):
    resposta = client.post("/financas/novo", data={
        "tipo": "saida", "categoria": "outro", "descricao": "Script", "valor": "1",
        "data_transacao": "2023-06-10",
        "recibo_url__ficheiro": (io.BytesIO(b"echo"), "script.sh"),
    }, content_type="multipart/form-data")
    assert resposta.status_code == 400
    assert "Tipo de ficheiro não permitido: script.sh" in texto(resposta)


def semear_financas(app):
    with app.app_context():
        repositorio("financas").inserir(
            {"tipo": "entrada", "categoria": "outro", "descricao": "Corridas", "valor": Decimal("350000"),
             "data_transacao": datetime(2023, 6, 10)},
            {"tipo": "saida", "categoria": "combustivel", "descricao": "Gasóleo", "valor": Decimal("45000"),
             "data_transacao": datetime(2023, 6, 12)},
            {"tipo": "saida", "categoria": "manutencao", "descricao": "Revisão", "valor": Decimal("25000"),
             "data_transacao": datetime(2023, 7, 1)},
        )


def test_lista_de_financas_com_resumo(client, app):
    semear_financas(app)
    pagina = texto(client.get("/financas/?aba=saidas&categoria=combustivel"))
    assert "Gasóleo" in pagina
    assert "Corridas" not in pagina
    assert "45 000,00 Kz" in pagina


def test_relatorio_mensal(client, app):
    semear_financas(app)
    pagina = texto(client.get("/relatorios?tipo=mensal&data=2023-06-20"))
    assert "01/06/2023 a 30/06/2023" in pagina
    assert "350 000,00 Kz" in pagina
    assert "305 000,00 Kz" in pagina
    assert "Revisão" not in pagina


def test_relatorio_semanal_comeca_ao_domingo(client):
    pagina = texto(client.get("/relatorios?tipo=semanal&data=2023-06-14"))
    assert "11/06/2023 a 17/06/2023" in pagina
    assert "Sem transações no período." in pagina


def test_relatorio_pdf(client, app, monkeypatch):
    semear_financas(app)
    recebido = {}

    def pdf_falso(html):
        recebido["html"] = html
        return b"%PDF-falso"

    monkeypatch.setattr(aplicacao, "gerar_pdf", pdf_falso)
    resposta = client.get("/relatorios?tipo=mensal&data=2023-06-20&formato=pdf")
    assert resposta.status_code == 200
    assert resposta.mimetype == "application/pdf"
    assert resposta.data == b"%PDF-falso"
    assert "relatorio_mensal_2023-06-01.pdf" in resposta.headers["Content-Disposition"]
    assert "Gasóleo" in recebido["html"]


def test_relatorio_pdf_com_erro(client, monkeypatch):
    def pdf_avariado(html):
        raise OSError("sem bibliotecas gráficas")

    monkeypatch.setattr(aplicacao, "gerar_pdf", pdf_avariado)
    resposta = client.get("/relatorios?formato=pdf", follow_redirects=True)
    assert resposta.status_code == 200
    assert "Ocorreu um erro ao gerar o PDF do relatório." in texto(resposta)


def test_eventos_de_tabela_desconhecida(client):
    assert client.get("/eventos/utilizadores").status_code == 404


def test_valor_nao_finito_no_formulario(client, app):
    resposta = client.post("/financas/novo", data={"tipo": "saida", "categoria": "outro", "descricao": "Gasóleo",
                                                   "valor": "nan", "data_transacao": "2023-06-10"})
    assert resposta.status_code == 400
    assert "Valor: valor inválido." in texto(resposta)
    with app.app_context():
        assert repositorio("financas").selecionar() == []


def test_lista_mostra_escritas_de_outro_processo(client, app, tmp_path):
    assert "LD-1" not in texto(client.get("/veiculos/"))

    # Outra instância sobre o mesmo ficheiro: o seu canal não chega a esta
    outra = aplicacao.create_app({
        "TESTING": True,
        "SECRET_KEY": "teste",
        "SQLALCHEMY_DATABASE_URI": app.config["SQLALCHEMY_DATABASE_URI"],
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    })
    try:
        criar_veiculo(outra.test_client(), placa="ld-1")
    finally:
        fechar_listas(outra)
        with outra.app_context():
            db.session.remove()
            db.engine.dispose()

    assert "LD-1" in texto(client.get("/veiculos/"))


def semear_manutencao(app, status="agendado", veiculo_status="ativo"):
    with app.app_context():
        veiculo = repositorio("veiculos").inserir(
            {"placa": "LD-54-32-AA", "modelo": "Corolla", "marca": "Toyota", "status": veiculo_status})[0]
        repositorio("manutencoes").inserir(
            {"veiculo_id": veiculo["id"], "data_manutencao": datetime.now(), "descricao": "Troca de óleo",
             "status": status})


def test_completar_manutencao_na_lista(client, app):
    semear_manutencao(app)
    assert "Precisa de revisão" in texto(client.get("/veiculos/"))
    assert "Completar" in texto(client.get("/manutencoes/"))

    resposta = client.post("/manutencoes/1/completar", follow_redirects=True)
    assert resposta.request.path == "/manutencoes/"
    assert "Manutenção marcada como completa!" in texto(resposta)
    assert "Completar" not in texto(resposta)
    assert "Em dia" in texto(client.get("/veiculos/"))


def test_completar_manutencao_inexistente(client):
    resposta = client.post("/manutencoes/42/completar", follow_redirects=True)
    assert "Erro ao atualizar status: Registo não encontrado." in texto(resposta)


def test_detalhe_da_manutencao(client, app):
    semear_manutencao(app)
    pagina = texto(client.get("/manutencoes/1"))
    assert "Troca de óleo" in pagina
    assert "Corolla (LD-54-32-AA)" in pagina
    assert "Marcar como completa" in pagina

    resposta = client.post("/manutencoes/1/completar", data={"origem": "detalhe"}, follow_redirects=True)
    assert resposta.request.path == "/manutencoes/1"
    assert "Manutenção marcada como completa!" in texto(resposta)
    assert "Marcar como completa" not in texto(resposta)


def test_detalhe_inexistente(client):
    resposta = client.get("/veiculos/42", follow_redirects=True)
    assert resposta.request.path == "/veiculos/"
    assert "Veículo não encontrado(a)." in texto(resposta)


def test_formulario_mantem_veiculo_inativo_ligado(client, app):
    semear_manutencao(app, status="completo", veiculo_status="inativo")
    pagina = texto(client.get("/manutencoes/1/editar"))
    assert "LD-54-32-AA" in pagina
    assert '<option value="1" selected>' in pagina

    # Num registo novo o veículo inativo não é oferecido
    assert "LD-54-32-AA" not in texto(client.get("/manutencoes/novo"))
