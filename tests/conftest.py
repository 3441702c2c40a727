"""
Pytest configuration and shared fixtures
"""
import sys
import pytest
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def make_config(tmp_path, backend, **overrides):
    """Build a TestingConfig subclass bound to a temporary store"""
    from config import TestingConfig

    attrs = {
        'STORAGE_BACKEND': backend,
        'DOCUMENT_STORE_FOLDER': str(tmp_path / 'documents'),
        'LOG_DIR': str(tmp_path / 'logs'),
        'DATABASE_URL': f"sqlite:///{tmp_path / 'rcb.db'}" if backend == 'sql' else None,
    }
    attrs.update(overrides)
    return type(f'{backend.title()}TestingConfig', (TestingConfig,), attrs)


@pytest.fixture(params=['document', 'sql'])
def storage_backend(request):
    """Run the test once per storage adapter"""
    return request.param


@pytest.fixture
def fake_ai():
    """Stand-in for AIService; tests set return values per call"""
    from ai_service import AIService

    ai = MagicMock(spec=AIService)
    ai.provider = 'openai'
    ai.is_available.return_value = False
    ai.status.return_value = {'provider': 'openai', 'available': False}
    return ai


@pytest.fixture
def app(tmp_path, storage_backend, fake_ai):
    """Application wired to a fresh store and a fake AI service"""
    from app_init import create_app, shutdown_app

    application = create_app(make_config(tmp_path, storage_backend))
    application.ai_service = fake_ai
    application.chat_relay.ai_service = fake_ai

    yield application

    shutdown_app(application)


@pytest.fixture
def storage(app):
    return app.storage


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def other_client(app):
    """A second browser with its own session cookie"""
    return app.test_client()


def register_account(client, username='asha', password='s3cure-pass', name=None):
    """Register (and thereby log in) a user through the API"""
    response = client.post('/api/register', json={
        'username': username,
        'password': password,
        'email': f'{username}@example.in',
        'name': name or username.title(),
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def register():
    """Helper for tests that register accounts themselves"""
    return register_account


@pytest.fixture
def user(client):
    return register_account(client, 'asha')


@pytest.fixture
def other_user(other_client):
    return register_account(other_client, 'vikram')


@pytest.fixture
def contractors(storage):
    """Three contractors in the directory"""
    return [
        storage.create_contractor({
            'name': 'Sharma Construction',
            'description': 'Full home renovations',
            'specialty': 'General',
            'specialties': ['Kitchen', 'Bathroom'],
            'email': 'info@sharma.in',
            'location': 'Delhi, India',
        }),
        storage.create_contractor({
            'name': 'Modern Bath Solutions',
            'description': 'Bathroom remodeling',
            'specialty': 'Specialist',
            'specialties': ['Bathrooms', 'Accessible'],
            'email': 'info@modernbath.in',
            'location': 'Bangalore, India',
        }),
        storage.create_contractor({
            'name': 'Mehta Electrical Services',
            'description': 'Wiring and smart home installations',
            'specialty': 'Electrical',
            'specialties': ['Lighting', 'Smart Home'],
            'email': 'service@mehta.in',
            'location': 'Chennai, India',
        }),
    ]


@pytest.fixture
def sample_project_data():
    """Fixture providing sample project data"""
    return {
        'name': 'Kitchen Remodel',
        'type': 'renovation',
        'description': 'Modular kitchen with granite countertops',
        'status': 'planning',
        'estimatedCostMin': 150000,
        'estimatedCostMax': 250000,
        'timeline': '6 weeks',
        'location': 'Delhi',
        'squareFootage': 200,
        'details': {'rooms': ['kitchen']},
    }


@pytest.fixture
def project(client, user, sample_project_data):
    response = client.post('/api/projects', json=sample_project_data)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def renovation_estimate_reply():
    """Model JSON for a kitchen renovation estimate"""
    return {
        'totalCostMin': 150000,
        'totalCostMax': 200000,
        'breakdown': {
            'materials': {'min': 60000, 'max': 80000},
            'labor': {'min': 40000, 'max': 55000},
            'fixtures': {'min': 45000, 'max': 58000},
            'permits': 5000,
        },
        'recommendations': 'Use local granite; reuse cabinet carcasses; buy fixtures in bulk.',
        'timeline': '4-6 weeks',
    }
