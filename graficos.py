# graficos.py
import io
import base64

import matplotlib
matplotlib.use('Agg')  # Backend não-interativo: as imagens vão embutidas no HTML
import matplotlib.pyplot as plt

from config import ROTULOS


def _para_base64(fig):
    buf = io.BytesIO()
    fig.savefig(buf, format='png', bbox_inches='tight')
    plt.close(fig)
    buf.seek(0)
    return base64.b64encode(buf.read()).decode('utf-8')


def gerar_grafico_pizza(por_categoria, titulo):
    if not por_categoria:
        return None
    labels = [ROTULOS.get(c, c) for c in por_categoria]
    data = [float(v) for v in por_categoria.values()]
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.pie(data, labels=labels, autopct='%1.1f%%', startangle=90, colors=plt.cm.Paired.colors)
    ax.axis('equal')
    ax.set_title(titulo)
    return _para_base64(fig)


def gerar_grafico_barras(serie, titulo):
    if not serie or all(p['receitas'] == 0 and p['despesas'] == 0 for p in serie):
        return None
    rotulos = [p['rotulo'] for p in serie]
    posicoes = range(len(serie))
    largura = 0.4
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar([x - largura / 2 for x in posicoes], [float(p['receitas']) / 1000 for p in serie],
           largura, label='Receitas', color='#28a745')
    ax.bar([x + largura / 2 for x in posicoes], [float(p['despesas']) / 1000 for p in serie],
           largura, label='Despesas', color='#dc3545')
    ax.set_xticks(list(posicoes))
    ax.set_xticklabels(rotulos)
    ax.set_ylabel('Valor (milhares Kz)')
    ax.set_title(titulo)
    ax.legend()
    return _para_base64(fig)
