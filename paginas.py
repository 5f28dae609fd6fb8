# paginas.py
"""Ecrãs de lista/formulário, iguais para as cinco entidades."""
import logging
import threading
from datetime import datetime

from flask import (Blueprint, current_app, flash, has_request_context, redirect,
                   render_template, request, url_for)

from armazem import ErroArmazem, repositorio
from classificacao import esta_atrasada, precisa_manutencao_em_breve
from datas import parse_data
from editor import CRIAR, EDITAR, EditorRegistro, ErroValidacao, marcar_completa
from ficheiros import ErroFicheiro
from filtros import EstadoFiltro, filtrar
from financas import calcular_resumo
from listas import ControladorLista
from recursos import MANUTENCOES, MOTORISTAS, RECURSOS

logger = logging.getLogger(__name__)

_lock_listas = threading.Lock()


# --- FUNÇÕES AUXILIARES ---
def notificar(mensagem, categoria):
    if has_request_context():
        flash(mensagem, categoria)


def controlador(ecra, recurso):
    """Controlador de lista do ecrã; cada ecrã tem o seu, nunca partilhado.

    Cada visita conta como uma montagem: a tabela é lida de novo, para
    apanhar escritas de outros processos que o canal não vê.
    """
    listas = current_app.extensions['listas']
    chave = (ecra, recurso.tabela)
    with _lock_listas:
        lista = listas.get(chave)
        if lista is None:
            lista = ControladorLista(recurso, repositorio(recurso.tabela),
                                     current_app.extensions['canal_alteracoes'], notificar)
            listas[chave] = lista
    if lista.montado:
        lista.recarregar()
    else:
        lista.montar()
    return lista


def fechar_listas(app):
    for lista in app.extensions.get('listas', {}).values():
        lista.desmontar()
    app.extensions['listas'] = {}


def estado_de_pedido(recurso, args):
    data = None
    try:
        data = parse_data(args.get('data'))
    except ValueError:
        flash('Data de filtro inválida.', 'warning')
    aba = args.get('aba') or 'todas'
    secundarios = dict(recurso.abas.get(aba, ('', {}))[1])
    if recurso.filtro_secundario:
        campo = recurso.filtro_secundario[0]
        if args.get(campo):
            secundarios[campo] = args[campo]
    estado = EstadoFiltro(
        consulta=(args.get('q') or '').strip(),
        status=args.get('status') or None,
        data=data,
        secundarios=secundarios,
    )
    return estado, aba


def contexto_extra(recurso, ecra):
    agora = datetime.now()
    if recurso.nome == 'veiculos':
        manutencoes = controlador(ecra, MANUTENCOES).linhas
        motoristas = controlador(ecra, MOTORISTAS).linhas
        meses = current_app.config['MESES_REVISAO']
        return {
            'motorista_de': {m['veiculo_id']: m for m in motoristas if m.get('veiculo_id')},
            'revisao': lambda veiculo_id: precisa_manutencao_em_breve(veiculo_id, manutencoes, agora, meses),
        }
    if recurso.nome in ('manutencoes', 'reparacoes'):
        return {'data_ultrapassada': lambda linha: linha.get('status') in ('agendado', 'pendente')
                and esta_atrasada(linha[recurso.campo_data], agora)}
    return {}


def opcoes_formulario(recurso, rascunho=None):
    """Listas para os seletores do formulário (veículos ativos, motoristas, manutenções).

    O veículo já ligado ao registo entra sempre, mesmo que esteja inativo.
    """
    rascunho = rascunho or {}
    tipos = {campo.tipo for campo in recurso.campos}
    opcoes = {}
    try:
        if 'veiculo' in tipos:
            opcoes['veiculo'] = repositorio('veiculos').selecionar('placa', descendente=False, status='ativo')
            atual = str(rascunho.get('veiculo_id') or '')
            if atual.isdigit() and int(atual) not in {v['id'] for v in opcoes['veiculo']}:
                ligado = repositorio('veiculos').obter(int(atual))
                if ligado is not None:
                    opcoes['veiculo'].append(ligado)
        if 'motorista' in tipos:
            opcoes['motorista'] = repositorio('motoristas').selecionar('nome', descendente=False)
        if 'manutencao' in tipos or recurso is MANUTENCOES:
            opcoes['manutencao'] = repositorio('manutencoes').selecionar('data_manutencao')
    except ErroArmazem as exc:
        flash(f'Erro ao buscar dados do formulário: {exc.mensagem}', 'danger')
    if recurso is MANUTENCOES:
        manutencoes = opcoes.get('manutencao', [])
        meses = current_app.config['MESES_REVISAO']
        opcoes['revisao'] = {v['id']: precisa_manutencao_em_breve(v['id'], manutencoes, meses=meses)
                             for v in opcoes.get('veiculo', [])}
    return opcoes


def anexar_ficheiros(recurso, rascunho):
    armazem = current_app.extensions['ficheiros']
    for campo in recurso.campos:
        if campo.tipo != 'ficheiro':
            continue
        enviado = request.files.get(f'{campo.nome}__ficheiro')
        if enviado and enviado.filename:
            url, nome_original = armazem.enviar(campo.bucket, enviado)
            rascunho[campo.nome] = url
            if campo.coluna_nome:
                rascunho[campo.coluna_nome] = nome_original


# --- FÁBRICA DE BLUEPRINTS ---
def criar_blueprint(recurso):
    bp = Blueprint(recurso.nome, __name__, url_prefix=f'/{recurso.nome}')

    def editor():
        return EditorRegistro(recurso, repositorio(recurso.tabela))

    def formulario(modo, rascunho, status=200):
        return render_template('formulario.html', recurso=recurso, modo=modo, rascunho=rascunho,
                               opcoes=opcoes_formulario(recurso, rascunho)), status

    def carregar(id):
        try:
            registro = repositorio(recurso.tabela).obter(id)
        except ErroArmazem as exc:
            flash(f'Erro ao buscar {recurso.singular.lower()}: {exc.mensagem}', 'danger')
            return None
        if registro is None:
            flash(f'{recurso.singular} não encontrado(a).', 'warning')
        return registro

    @bp.get('/')
    def lista():
        espelho = controlador(recurso.nome, recurso)
        estado, aba = estado_de_pedido(recurso, request.args)
        linhas = filtrar(espelho.linhas, estado, recurso)
        return render_template('lista.html', recurso=recurso, linhas=linhas, estado=estado, aba=aba,
                               carregando=espelho.carregando, total=len(espelho.linhas),
                               resumo=calcular_resumo(linhas) if recurso.nome == 'financas' else None,
                               **contexto_extra(recurso, recurso.nome))

    @bp.get('/<int:id>')
    def detalhe(id):
        registro = carregar(id)
        if registro is None:
            return redirect(url_for('.lista'))
        return render_template('detalhe.html', recurso=recurso, registro=registro,
                               **contexto_extra(recurso, recurso.nome))

    @bp.route('/novo', methods=['GET', 'POST'])
    def novo():
        if request.method == 'GET':
            return formulario(CRIAR, {})
        return submeter(CRIAR, request.form.to_dict())

    @bp.route('/<int:id>/editar', methods=['GET', 'POST'])
    def editar(id):
        if request.method == 'POST':
            rascunho = request.form.to_dict()
            rascunho['id'] = id
            return submeter(EDITAR, rascunho)
        registro = carregar(id)
        if registro is None:
            return redirect(url_for('.lista'))
        return formulario(EDITAR, registro)

    def submeter(modo, rascunho):
        try:
            anexar_ficheiros(recurso, rascunho)
            resultado = editor().submeter(rascunho, modo)
        except ErroValidacao as exc:
            for mensagem in exc.erros.values():
                flash(mensagem, 'warning')
            return formulario(modo, rascunho, 400)
        except ErroFicheiro as exc:
            flash(str(exc), 'danger')
            return formulario(modo, rascunho, 400)
        if not resultado:
            # O formulário fica aberto para nova tentativa
            flash(resultado.mensagem, 'danger')
            return formulario(modo, rascunho, 200)
        flash(resultado.mensagem, 'success')
        return redirect(url_for('.lista'))

    @bp.route('/<int:id>/apagar', methods=['GET', 'POST'])
    def apagar(id):
        if request.method == 'GET':
            registro = carregar(id)
            if registro is None:
                return redirect(url_for('.lista'))
            return render_template('apagar.html', recurso=recurso, registro=registro)
        resultado = editor().apagar(id, confirmado=request.form.get('confirmar') == 'sim')
        flash(resultado.mensagem, 'success' if resultado else 'danger')
        return redirect(url_for('.lista'))

    if recurso is MANUTENCOES:
        @bp.post('/<int:id>/completar')
        def completar(id):
            resultado = marcar_completa(repositorio(recurso.tabela), id)
            flash(resultado.mensagem, 'success' if resultado else 'danger')
            if request.form.get('origem') == 'detalhe':
                return redirect(url_for('.detalhe', id=id))
            return redirect(url_for('.lista'))

    return bp


def registar_paginas(app):
    for recurso in RECURSOS.values():
        app.register_blueprint(criar_blueprint(recurso))
