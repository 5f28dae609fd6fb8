# init_db.py
from datetime import date, datetime
from decimal import Decimal

from app import create_app
from database import db
from models import Financa, Manutencao, Motorista, Reparacao, Veiculo


def criar_dados_iniciais():
    app = create_app()
    with app.app_context():
        print("Criando todas as tabelas do banco de dados...")
        db.create_all()
        print("Tabelas criadas.")

        if Veiculo.query.first():
            print("A base de dados já tem veículos; dados de exemplo não foram criados.")
            return

        print("Criando dados de exemplo...")
        corolla = Veiculo(placa='LD-54-32-AA', modelo='Corolla', marca='Toyota', ano=2019, quilometragem=45000)
        civic = Veiculo(placa='LD-65-43-BB', modelo='Civic', marca='Honda', ano=2020, quilometragem=62000)
        camry = Veiculo(placa='LD-76-54-CC', modelo='Camry', marca='Toyota', ano=2018, quilometragem=31000)
        accord = Veiculo(placa='LD-87-65-DD', modelo='Accord', marca='Honda', ano=2017, quilometragem=71000, status='inativo')
        db.session.add_all([corolla, civic, camry, accord])
        db.session.flush()

        db.session.add_all([
            Motorista(nome='João Silva', documento='BI987654321', endereco='Rua Principal 123, Luanda',
                      telefone='923 000 001', data_contratacao=date(2022, 1, 10), veiculo_id=corolla.id),
            Motorista(nome='Manuel Santos', documento='BI123456789', endereco='Av. 4 de Fevereiro, Luanda',
                      telefone='923 000 002', data_contratacao=date(2022, 3, 2), veiculo_id=civic.id),
            Motorista(nome='Carlos Oliveira', documento='BI555444333', data_contratacao=date(2021, 7, 19), status='inativo'),
            Motorista(nome='Ana Pereira', documento='BI222333444', data_contratacao=date(2023, 2, 1), veiculo_id=camry.id),
        ])

        revisao_corolla = Manutencao(veiculo_id=corolla.id, data_manutencao=datetime(2023, 6, 15), status='completo',
                                     descricao='Manutenção regular de 40.000 km', custo=Decimal('25000'))
        db.session.add_all([
            revisao_corolla,
            Manutencao(veiculo_id=civic.id, data_manutencao=datetime(2023, 5, 20), status='completo',
                       descricao='Manutenção regular de 60.000 km', custo=Decimal('35000')),
            Manutencao(veiculo_id=camry.id, data_manutencao=datetime(2023, 7, 10), status='completo',
                       descricao='Manutenção regular de 30.000 km', custo=Decimal('20000')),
            Manutencao(veiculo_id=corolla.id, data_manutencao=datetime(2023, 8, 15), status='agendado',
                       descricao='Manutenção regular de 50.000 km'),
        ])
        db.session.flush()

        db.session.add_all([
            Reparacao(veiculo_id=corolla.id, manutencao_id=revisao_corolla.id, data_reparacao=datetime(2023, 6, 15),
                      peca_substituida='Pastilhas de freio', preco=Decimal('15000'), tipo='corretiva',
                      descricao='Substituição das pastilhas de freio dianteiras'),
            Reparacao(veiculo_id=civic.id, data_reparacao=datetime(2023, 5, 20), peca_substituida='Correia de distribuição',
                      preco=Decimal('20000'), tipo='preventiva', descricao='Substituição da correia de distribuição e tensor'),
        ])

        db.session.add_all([
            Financa(tipo='entrada', categoria='outro', descricao='Receita semanal de corridas',
                    valor=Decimal('350000'), data_transacao=datetime(2023, 6, 10)),
            Financa(tipo='saida', categoria='combustivel', descricao='Abastecimento da frota',
                    valor=Decimal('45000'), data_transacao=datetime(2023, 6, 10)),
            Financa(tipo='saida', categoria='manutencao', descricao='Manutenção Toyota Corolla',
                    valor=Decimal('25000'), data_transacao=datetime(2023, 6, 15), veiculo_id=corolla.id),
            Financa(tipo='saida', categoria='reparacao', descricao='Reparação correia de distribuição Honda Civic',
                    valor=Decimal('20000'), data_transacao=datetime(2023, 5, 20), veiculo_id=civic.id),
        ])
        db.session.commit()
        print("Dados de exemplo criados com sucesso!")


if __name__ == '__main__':
    criar_dados_iniciais()
