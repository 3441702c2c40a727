"""
Centralized AI Service Manager
Handles all language model calls with retry logic, error handling, and configuration management
"""
import re
import json
import time
import logging
from typing import Optional, Dict, Any, List
from functools import wraps

import anthropic
import openai

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Base exception for AI service errors"""
    pass


class AIServiceUnavailable(AIServiceError):
    """Raised when AI service is not configured or unavailable"""
    pass


class AIServiceTimeout(AIServiceError):
    """Raised when AI service times out"""
    pass


class AIRateLimitError(AIServiceError):
    """Raised when the provider rejects a call for quota or rate limit reasons"""
    pass


def is_rate_limit_error(error: Exception) -> bool:
    """
    Detect provider quota/rate limit failures.

    Matches HTTP 429, the ``insufficient_quota`` error code, or a message
    that mentions quota or rate limit.
    """
    if isinstance(error, (openai.RateLimitError, anthropic.RateLimitError)):
        return True
    if getattr(error, 'status_code', None) == 429:
        return True
    if getattr(error, 'code', None) == 'insufficient_quota':
        return True
    message = str(error).lower()
    return 'insufficient_quota' in message or 'quota' in message or 'rate limit' in message


def retry_on_failure(backoff=2):
    """
    Decorator to retry an AIService method on failure with exponential backoff.

    The number of attempts and the initial delay come from the service config
    (AI_RETRY_ATTEMPTS, AI_RETRY_DELAY). Rate limit and configuration errors
    are raised immediately.

    Args:
        backoff: Multiplier for delay on each retry
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            max_attempts = max(1, int(self.config.get('AI_RETRY_ATTEMPTS', 1)))
            current_delay = self.config.get('AI_RETRY_DELAY', 2)
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return func(self, *args, **kwargs)
                except (AIRateLimitError, AIServiceUnavailable):
                    raise
                except AIServiceError as e:
                    last_exception = e
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {str(e)}"
                    )

                    if attempt < max_attempts - 1:
                        logger.info(f"Retrying in {current_delay} seconds...")
                        time.sleep(current_delay)
                        current_delay *= backoff
                    elif max_attempts > 1:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}")

            raise last_exception

        return wrapper
    return decorator


def parse_json_response(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse a model reply that should contain a JSON object.
    Code fences are stripped. Unparseable replies yield an empty dict.
    """
    if not text:
        return {}
    cleaned = text.strip()
    fenced = re.search(r"```(?:json)?\s*(.*?)```", cleaned, re.DOTALL)
    if fenced:
        cleaned = fenced.group(1).strip()
    try:
        data = json.loads(cleaned)
    except ValueError:
        # Fall back to the outermost braces in prose-wrapped replies
        start, end = cleaned.find('{'), cleaned.rfind('}')
        if start == -1 or end <= start:
            logger.warning("Model reply was not valid JSON")
            return {}
        try:
            data = json.loads(cleaned[start:end + 1])
        except ValueError:
            logger.warning("Model reply was not valid JSON")
            return {}
    return data if isinstance(data, dict) else {}


class AIService:
    """
    Centralized AI service manager with retry logic and error handling.

    The chat provider is chosen by AI_PROVIDER: 'openai', 'azure' (Azure
    OpenAI deployment) or 'anthropic'. Image generation is only offered
    through OpenAI.
    """

    def __init__(self, config):
        """
        Initialize AI service with configuration

        Args:
            config: Flask app configuration object
        """
        self.config = config
        self.provider = (config.get('AI_PROVIDER') or 'openai').lower()
        self.anthropic_client = None
        self.openai_client = None

        self._initialize_clients()

    def _initialize_clients(self):
        """Initialize AI API clients"""
        timeout = self.config.get('AI_TIMEOUT', 120)

        # Anthropic Claude
        if self.config.get('ANTHROPIC_API_KEY'):
            try:
                self.anthropic_client = anthropic.Anthropic(
                    api_key=self.config['ANTHROPIC_API_KEY'],
                    timeout=timeout
                )
                logger.info("Anthropic Claude client initialized")
            except Exception as e:
                logger.error(f"Failed to initialize Anthropic client: {e}")

        # Azure OpenAI deployment
        if self.provider == 'azure':
            if self.config.get('AZURE_OPENAI_API_KEY') and self.config.get('AZURE_OPENAI_ENDPOINT'):
                try:
                    self.openai_client = openai.AzureOpenAI(
                        api_key=self.config['AZURE_OPENAI_API_KEY'],
                        azure_endpoint=self.config['AZURE_OPENAI_ENDPOINT'],
                        api_version=self.config.get('AZURE_OPENAI_API_VERSION'),
                        timeout=timeout
                    )
                    logger.info("Azure OpenAI client initialized")
                except Exception as e:
                    logger.error(f"Failed to initialize Azure OpenAI client: {e}")
            else:
                logger.warning("AI_PROVIDER=azure but Azure OpenAI credentials are missing")

        # OpenAI GPT
        elif self.config.get('OPENAI_API_KEY'):
            try:
                self.openai_client = openai.OpenAI(
                    api_key=self.config['OPENAI_API_KEY'],
                    timeout=timeout
                )
                logger.info("OpenAI client initialized")
            except Exception as e:
                logger.error(f"Failed to initialize OpenAI client: {e}")

    # =========================================================================
    # PROVIDER CALLS
    # =========================================================================

    def _chat_model(self) -> str:
        if self.provider == 'azure':
            return self.config.get('AZURE_OPENAI_DEPLOYMENT_NAME') or self.config['AI_MODELS']['openai']['model']
        return self.config['AI_MODELS']['openai']['model']

    def _convert_error(self, provider: str, error: Exception) -> AIServiceError:
        if is_rate_limit_error(error):
            logger.error(f"{provider} rate limit or quota exceeded: {error}")
            return AIRateLimitError(f"{provider} quota or rate limit exceeded: {error}")
        if isinstance(error, (openai.APITimeoutError, anthropic.APITimeoutError)):
            logger.error(f"{provider} API timeout: {error}")
            return AIServiceTimeout(f"{provider} API timed out: {error}")
        logger.error(f"{provider} API error: {error}")
        return AIServiceError(f"{provider} API error: {error}")

    def _call_openai(self, messages: List[Dict[str, str]], json_mode: bool = False) -> str:
        if not self.openai_client:
            raise AIServiceUnavailable("OpenAI is not configured")

        model_config = self.config['AI_MODELS']['openai']
        model = self._chat_model()
        params = {
            'model': model,
            'messages': messages,
            'max_tokens': model_config['max_tokens'],
            'temperature': model_config['temperature'],
        }
        if json_mode:
            params['response_format'] = {'type': 'json_object'}

        try:
            logger.info(f"Calling OpenAI API: model={model}, max_tokens={params['max_tokens']}")
            response = self.openai_client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            raise self._convert_error('OpenAI', e)

        logger.info("OpenAI API call successful")
        return response.choices[0].message.content or ''

    def _call_claude(self, system: str, messages: List[Dict[str, str]]) -> str:
        if not self.anthropic_client:
            raise AIServiceUnavailable("Anthropic Claude is not configured")

        model_config = self.config['AI_MODELS']['claude']
        try:
            logger.info(f"Calling Claude API: model={model_config['model']}")
            response = self.anthropic_client.messages.create(
                model=model_config['model'],
                max_tokens=model_config['max_tokens'],
                temperature=model_config['temperature'],
                system=system,
                messages=messages
            )
        except anthropic.AnthropicError as e:
            raise self._convert_error('Claude', e)

        logger.info(f"Claude API call successful: stop_reason={response.stop_reason}")
        return ''.join(
            block.text for block in response.content if getattr(block, 'type', None) == 'text'
        )

    def _complete(self, system: str, messages: List[Dict[str, str]], json_mode: bool = False) -> str:
        if self.provider == 'anthropic':
            return self._call_claude(system, messages)
        return self._call_openai([{'role': 'system', 'content': system}] + messages, json_mode=json_mode)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @retry_on_failure(backoff=2)
    def chat(self, system: str, messages: List[Dict[str, str]]) -> str:
        """
        Send a conversation to the configured provider and return the reply text.

        Args:
            system: System prompt
            messages: List of {'role', 'content'} dictionaries

        Raises:
            AIServiceUnavailable: If no provider is configured
            AIRateLimitError: On quota/rate limit rejections
            AIServiceError: On other API errors
        """
        return self._complete(system, messages)

    @retry_on_failure(backoff=2)
    def complete_json(self, system: str, prompt: str) -> Dict[str, Any]:
        """Ask the model for a JSON object; malformed replies come back as {}."""
        text = self._complete(system, [{'role': 'user', 'content': prompt}], json_mode=True)
        return parse_json_response(text)

    @retry_on_failure(backoff=2)
    def generate_image(self, prompt: str) -> Optional[str]:
        """
        Generate an image and return its URL, or None when image generation
        is not available for the configured provider.
        """
        if not self.openai_client or self.provider == 'anthropic':
            return None

        model = self.config['AI_MODELS']['openai'].get('image_model', 'dall-e-3')
        try:
            logger.info(f"Calling OpenAI image API: model={model}")
            response = self.openai_client.images.generate(
                model=model,
                prompt=prompt,
                n=1,
                size='1024x1024'
            )
        except openai.OpenAIError as e:
            raise self._convert_error('OpenAI', e)

        return response.data[0].url if response.data else None

    def is_available(self, service: Optional[str] = None) -> bool:
        """
        Check if a specific AI service is available

        Args:
            service: Service name ('openai', 'claude', 'image') or None for
                the configured chat provider

        Returns:
            True if service is available, False otherwise
        """
        if service == 'claude':
            return self.anthropic_client is not None
        elif service in ('openai', 'image'):
            return self.openai_client is not None
        elif service is None:
            if self.provider == 'anthropic':
                return self.anthropic_client is not None
            return self.openai_client is not None
        else:
            return False

    def status(self) -> Dict[str, Any]:
        """Provider configuration summary for health checks (no secrets)."""
        return {
            'provider': self.provider,
            'available': self.is_available(),
            'openai_configured': self.openai_client is not None,
            'anthropic_configured': self.anthropic_client is not None,
        }
