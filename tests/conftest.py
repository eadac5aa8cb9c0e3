# tests/conftest.py
"""
Fixtures compartilhados para todos os testes da API de relatos
"""
import os
import pytest
from datetime import datetime, timedelta

# Forçar variáveis de ambiente ANTES de importar a app
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing'

from app import create_app, db as _db
from app.models import User, Category, Report, ReportStatus, seed_categories


@pytest.fixture(scope='function')
def app():
    """Cria a aplicação Flask para testes"""
    app = create_app()
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SERVER_NAME': 'localhost',
        'SECRET_KEY': 'test-secret-key-for-testing',
        'SHOW_ERROR_DETAILS': False,
        'WEEK_START': 'sunday',
    })
    return app


@pytest.fixture(scope='function')
def db(app):
    """Cria e limpa o banco de dados para cada teste"""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    """Cliente de teste HTTP"""
    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture
def app_context(app, db):
    """Contexto da aplicação"""
    with app.app_context():
        yield app


@pytest.fixture
def categories(db):
    """Categorias padrão (Pothole=1, Street Light=2, ...)"""
    seed_categories()
    return {c.name: c for c in Category.query.all()}


@pytest.fixture
def citizen(db):
    """Cria um cidadão de teste"""
    user = User(email='citizen@test.com', full_name='Test Citizen', role='citizen')
    user.set_password('CitizenPass123')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def staff_user(db):
    """Cria um funcionário da prefeitura"""
    user = User(email='staff@test.com', full_name='Staff User', role='staff')
    user.set_password('StaffPass123')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_report(db, categories):
    """Fábrica de relatos com datas controladas"""
    def _make(title='Buraco na rua', description='Buraco grande', address='Rua das Flores, 10',
              category='Pothole', status=ReportStatus.Submitted, created_at=None,
              resolved_at=None, image_url=None, user=None, **kwargs):
        created_at = created_at or datetime.utcnow()
        report = Report(
            title=title,
            description=description,
            address=address,
            category_id=categories[category].id,
            status=status,
            created_at=created_at,
            updated_at=created_at,
            resolved_at=resolved_at,
            image_url=image_url,
            user_id=user.id if user else None,
            **kwargs,
        )
        db.session.add(report)
        db.session.commit()
        return report
    return _make


@pytest.fixture
def report(make_report):
    """Relato anônimo recém-criado"""
    return make_report()


@pytest.fixture
def days_ago():
    def _days_ago(days, hours=0):
        return datetime.utcnow() - timedelta(days=days, hours=hours)
    return _days_ago


def login(client, email, password):
    """Helper para fazer login nos testes"""
    return client.post('/api/auth/login', json={
        'email': email,
        'password': password,
    })


def logout(client):
    """Helper para fazer logout"""
    return client.post('/api/auth/logout')
