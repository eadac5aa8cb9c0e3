import logging
import os
from app import create_app, db

os.makedirs('logs', exist_ok=True)

# Configurar logging
logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('logs/app.log'),
        logging.StreamHandler()
    ]
)

app = create_app()


@app.shell_context_processor
def make_shell_context():
    # Importar models aqui para evitar importação circular
    from app.models import User, Category, Report, ReportStatus

    return {'db': db, 'User': User, 'Category': Category, 'Report': Report, 'ReportStatus': ReportStatus}


if __name__ == '__main__':
    from app.models import seed_categories

    with app.app_context():
        # Mostrar configuração do banco
        app.logger.info(f"Banco de dados: {app.config['SQLALCHEMY_DATABASE_URI']}")

        # Criar tabelas e categorias padrão
        db.create_all()
        created = seed_categories()
        app.logger.info(f"Banco de dados criado/atualizado ({created} categorias novas)")

    debug = os.environ.get('FLASK_DEBUG', 'False').lower() in ['true', '1', 'on']
    app.run(debug=debug, host='0.0.0.0', port=5000)
