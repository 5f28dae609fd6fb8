# app.py
import logging
from datetime import datetime
from decimal import Decimal

from flask import (Flask, Response, abort, current_app, flash, redirect, render_template,
                   request, send_from_directory, stream_with_context, url_for)

# Importações locais
from armazem import MODELOS, ErroArmazem, repositorio
from classificacao import manutencoes_atrasadas, manutencoes_proximas, precisa_manutencao_em_breve
from config import Config, ROTULOS
from datas import para_date, parse_data
from database import db
from editor import atribuir_motorista
from ficheiros import ArmazemFicheiros
from filtros import valor_caminho
from financas import TIPOS_RELATORIO, calcular_resumo, gerar_relatorio, serie_mensal
from graficos import gerar_grafico_barras, gerar_grafico_pizza
from paginas import controlador, registar_paginas
from realtime import TODAS, CanalAlteracoes, fluxo_eventos
from recursos import FINANCAS, MANUTENCOES, MOTORISTAS, VEICULOS

logger = logging.getLogger(__name__)


# --- FILTROS DE APRESENTAÇÃO ---
def dinheiro(valor):
    if valor is None or valor == '':
        return '—'
    texto = f"{Decimal(str(valor)):,.2f}".replace(',', ' ').replace('.', ',')
    return f"{texto} Kz"


def data_br(valor):
    dia = para_date(valor) if valor not in (None, '') else None
    return dia.strftime('%d/%m/%Y') if dia else '—'


def rotulo(valor):
    return ROTULOS.get(valor, valor or '—')


def rotulo_veiculo(linha):
    veiculo = linha.get('veiculo')
    if veiculo:
        return f"{veiculo['modelo']} ({veiculo['placa']})"
    return 'Veículo não encontrado' if linha.get('veiculo_id') else '—'


def valor_form(valor):
    if valor is None:
        return ''
    if hasattr(valor, 'strftime'):
        return valor.strftime('%Y-%m-%d')
    return str(valor)


def gerar_pdf(html):
    from weasyprint import HTML  # Só carregado quando se pede o PDF
    return HTML(string=html).write_pdf()


# --- FÁBRICA DA APLICAÇÃO ---
def create_app(config_override=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_override:
        app.config.update(config_override)

    logging.basicConfig(level=app.config['LOG_LEVEL'])

    # Inicializa as extensões com o app
    db.init_app(app)
    app.extensions['canal_alteracoes'] = CanalAlteracoes()
    app.extensions['listas'] = {}
    app.extensions['ficheiros'] = ArmazemFicheiros(
        app.config['UPLOAD_FOLDER'],
        lambda bucket, nome: url_for('ficheiro', bucket=bucket, nome=nome),
    )

    with app.app_context():
        db.create_all()

    app.add_template_filter(dinheiro)
    app.add_template_filter(data_br)
    app.add_template_filter(rotulo)
    app.add_template_filter(rotulo_veiculo)
    app.add_template_filter(valor_form)
    app.add_template_global(valor_caminho)

    registar_paginas(app)

    # --- PAINEL ---
    @app.get('/')
    def home():
        agora = datetime.now()
        motoristas = controlador('painel', MOTORISTAS).linhas
        veiculos = controlador('painel', VEICULOS).linhas
        manutencoes = controlador('painel', MANUTENCOES).linhas
        transacoes = controlador('painel', FINANCAS).linhas

        resumo = calcular_resumo(transacoes)
        meses = app.config['MESES_REVISAO']
        revisao = [v for v in veiculos
                   if v['status'] == 'ativo' and precisa_manutencao_em_breve(v['id'], manutencoes, agora, meses)]
        grafico_mensal = gerar_grafico_barras(serie_mensal(transacoes, agora), 'Receitas vs. Despesas (últimos 6 meses)')
        grafico_categorias = gerar_grafico_pizza(resumo.por_categoria, 'Despesas por Categoria')
        return render_template(
            'index.html',
            hoje=agora,
            total_motoristas=sum(1 for m in motoristas if m['status'] == 'ativo'),
            total_veiculos=sum(1 for v in veiculos if v['status'] == 'ativo'),
            atrasadas=manutencoes_atrasadas(manutencoes, agora),
            proximas=manutencoes_proximas(manutencoes, agora),
            revisao=revisao,
            resumo=resumo,
            grafico_mensal=grafico_mensal,
            grafico_categorias=grafico_categorias,
        )

    # --- RELATÓRIOS ---
    @app.get('/relatorios')
    def relatorios():
        tipo = request.args.get('tipo', 'mensal')
        if tipo not in TIPOS_RELATORIO:
            flash('Tipo de relatório inválido.', 'warning')
            tipo = 'mensal'
        try:
            ancora = parse_data(request.args.get('data')) or datetime.now().date()
        except ValueError:
            flash('Data inválida. Use o formato AAAA-MM-DD.', 'warning')
            ancora = datetime.now().date()

        transacoes = controlador('relatorios', FINANCAS).linhas
        relatorio = gerar_relatorio(transacoes, tipo, ancora, app.config['SEMANA_COMECA_EM'])

        if request.args.get('formato') != 'pdf':
            return render_template('relatorios.html', relatorio=relatorio, ancora=ancora, tipos=TIPOS_RELATORIO)

        try:
            grafico = gerar_grafico_pizza(relatorio.resumo.por_categoria, 'Distribuição de Gastos por Categoria')
            html_renderizado = render_template('relatorio_pdf.html', relatorio=relatorio, grafico=grafico,
                                               data_emissao=datetime.now())
            pdf = gerar_pdf(html_renderizado)
        except Exception:
            logger.exception("Erro ao gerar relatório %s de %s", tipo, ancora)
            flash('Ocorreu um erro ao gerar o PDF do relatório. Tente novamente.', 'danger')
            return redirect(url_for('relatorios', tipo=tipo, data=ancora.isoformat()))
        nome = f"relatorio_{tipo}_{relatorio.inicio.isoformat()}.pdf"
        return Response(pdf, mimetype='application/pdf',
                        headers={'Content-Disposition': f'attachment;filename={nome}'})

    # --- ATRIBUIÇÃO DE MOTORISTA ---
    @app.route('/veiculos/<int:id>/motorista', methods=['GET', 'POST'])
    def atribuir(id):
        motoristas = repositorio('motoristas')
        if request.method == 'POST':
            escolhido = request.form.get('motorista_id')
            motorista_id = int(escolhido) if escolhido and escolhido.isdigit() else None
            resultado = atribuir_motorista(motoristas, id, motorista_id)
            flash(resultado.mensagem, 'success' if resultado else 'danger')
            return redirect(url_for('veiculos.lista'))
        try:
            veiculo = repositorio('veiculos').obter(id)
            disponiveis = motoristas.selecionar('nome', descendente=False, status='ativo')
        except ErroArmazem as exc:
            flash(exc.mensagem, 'danger')
            return redirect(url_for('veiculos.lista'))
        if veiculo is None:
            flash('Veículo não encontrado.', 'warning')
            return redirect(url_for('veiculos.lista'))
        atual = next((m for m in disponiveis if m.get('veiculo_id') == id), None)
        return render_template('atribuir.html', veiculo=veiculo, motoristas=disponiveis, atual=atual)

    # --- NOTIFICAÇÕES EM TEMPO REAL ---
    @app.get('/eventos/<tabela>')
    def eventos(tabela):
        if tabela != TODAS and tabela not in MODELOS:
            abort(404)
        fluxo = fluxo_eventos(current_app.extensions['canal_alteracoes'], tabela, app.config['SSE_KEEPALIVE'])
        return Response(stream_with_context(fluxo), mimetype='text/event-stream',
                        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'})

    # --- FICHEIROS ---
    @app.get('/ficheiros/<bucket>/<path:nome>')
    def ficheiro(bucket, nome):
        return send_from_directory(current_app.extensions['ficheiros'].pasta(bucket), nome)

    return app


if __name__ == '__main__':
    create_app().run(debug=True, threaded=True)
