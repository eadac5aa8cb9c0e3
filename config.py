import os
from dotenv import load_dotenv

load_dotenv()

# Diretório base do projeto
basedir = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ['true', '1', 'on', 'yes']


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'

    # Database - Usar caminho absoluto
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'reports.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Ambiente: detalhes de erro só aparecem em desenvolvimento
    APP_ENV = os.environ.get('APP_ENV', 'production')
    SHOW_ERROR_DETAILS = _env_flag('SHOW_ERROR_DETAILS', APP_ENV == 'development')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Frontend
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:8080,http://localhost:3000,http://localhost:3001,http://localhost:3002'
        ).split(',')
        if origin.strip()
    ]

    # Dashboard
    WEEK_START = os.environ.get('WEEK_START', 'sunday')  # sunday ou monday (qualquer dia da semana)
    OVERDUE_DAYS = int(os.environ.get('OVERDUE_DAYS', '30'))
    QUICK_RESOLUTION_DAYS = int(os.environ.get('QUICK_RESOLUTION_DAYS', '7'))

    # Paginação
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100
