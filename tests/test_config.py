"""
Tests for configuration system
"""
import os
import pytest
from config import (
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    StoragePolicyError,
    get_config,
    get_storage_mode,
    validate_storage_config,
)
from security import SecurityConfig, required_environment


@pytest.mark.unit
class TestBaseConfig:
    """Tests for base configuration"""

    def test_base_config_has_secret_key(self):
        """Test that base config has a secret key"""
        config = Config()
        assert config.SECRET_KEY is not None

    def test_base_config_has_cors_settings(self):
        """Test that base config has CORS settings"""
        config = Config()
        assert 'PATCH' in config.CORS_METHODS
        assert 'DELETE' in config.CORS_METHODS

    def test_base_config_has_ai_models(self):
        """Test that base config has AI model configuration"""
        config = Config()
        assert 'claude' in config.AI_MODELS
        assert 'openai' in config.AI_MODELS
        assert config.AI_MODELS['claude']['model'] == 'claude-sonnet-4-20250514'
        assert config.AI_MODELS['openai']['max_tokens'] == 2000

    def test_base_config_has_retry_settings(self):
        """Test that base config has retry settings"""
        config = Config()
        assert config.AI_RETRY_ATTEMPTS == 1
        assert config.AI_RETRY_DELAY == 2
        assert config.AI_TIMEOUT == 120

    def test_base_config_has_chat_timeout(self):
        """Test the external chat relay timeout"""
        assert Config.CHAT_RELAY_TIMEOUT == 30


@pytest.mark.unit
class TestEnvironmentConfigs:
    """Tests for the per-environment classes"""

    def test_development_config(self):
        config = DevelopmentConfig()
        assert config.DEBUG is True
        assert config.TESTING is False
        assert '*' in config.CORS_ORIGINS

    def test_production_config_has_secure_cookies(self):
        """Test that production config has secure cookies"""
        config = ProductionConfig()
        assert config.DEBUG is False
        assert config.SESSION_COOKIE_SECURE is True
        assert config.SESSION_COOKIE_HTTPONLY is True
        assert config.SESSION_COOKIE_SAMESITE == 'Lax'

    def test_testing_config(self):
        """Test that testing config uses the document store without seeding"""
        config = TestingConfig()
        assert config.TESTING is True
        assert config.STORAGE_BACKEND == 'document'
        assert config.SEED_CONTRACTORS is False
        assert config.AI_RETRY_DELAY == 0

    def test_testing_secret_key_is_accepted(self):
        """Test that the fixed testing key is not replaced at startup"""
        assert SecurityConfig.validate_secret_key(TestingConfig.SECRET_KEY)


@pytest.mark.unit
class TestGetConfig:
    """Tests for configuration selector"""

    @pytest.mark.parametrize('env, expected', [
        ('production', ProductionConfig),
        ('testing', TestingConfig),
        ('development', DevelopmentConfig),
        ('staging', DevelopmentConfig),
    ])
    def test_get_config_by_env(self, monkeypatch, env, expected):
        """Test that get_config follows FLASK_ENV"""
        monkeypatch.setenv('FLASK_ENV', env)
        assert get_config() == expected

    def test_get_config_returns_development_by_default(self, monkeypatch):
        """Test that get_config returns development config by default"""
        monkeypatch.delenv('FLASK_ENV', raising=False)
        assert get_config() == DevelopmentConfig


@pytest.mark.unit
class TestStoragePolicy:
    """Tests for storage backend selection"""

    def test_explicit_backend_wins(self):
        assert get_storage_mode({'STORAGE_BACKEND': 'Document', 'DATABASE_URL': 'postgresql://x'}) == 'document'

    def test_database_url_selects_sql(self):
        assert get_storage_mode({'DATABASE_URL': 'postgresql://x'}) == 'sql'

    def test_no_database_selects_document(self):
        assert get_storage_mode({}) == 'document'

    def test_unknown_backend(self):
        with pytest.raises(StoragePolicyError):
            get_storage_mode({'STORAGE_BACKEND': 'redis'})

    def test_sql_needs_database_url(self):
        with pytest.raises(StoragePolicyError):
            validate_storage_config({'STORAGE_BACKEND': 'sql'})

    def test_production_refuses_implicit_fallback(self, monkeypatch):
        """Test that production never silently falls back to files"""
        monkeypatch.setenv('FLASK_ENV', 'production')
        with pytest.raises(StoragePolicyError):
            validate_storage_config({})

    def test_production_allows_explicit_document_store(self, monkeypatch):
        monkeypatch.setenv('FLASK_ENV', 'production')
        assert validate_storage_config({'STORAGE_BACKEND': 'document'}) == 'document'

    def test_development_fallback(self, monkeypatch):
        monkeypatch.setenv('FLASK_ENV', 'development')
        assert validate_storage_config({}) == 'document'


@pytest.mark.unit
class TestRequiredEnvironment:
    """Tests for provider specific environment checks"""

    def test_openai(self):
        assert required_environment({'AI_PROVIDER': 'openai'}) == ['SECRET_KEY', 'OPENAI_API_KEY']

    def test_anthropic(self):
        assert 'ANTHROPIC_API_KEY' in required_environment({'AI_PROVIDER': 'anthropic'})

    def test_azure(self):
        required = required_environment({'AI_PROVIDER': 'azure'})
        assert 'AZURE_OPENAI_ENDPOINT' in required
        assert 'AZURE_OPENAI_DEPLOYMENT_NAME' in required
