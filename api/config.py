import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from the api directory or the project root
env_path = Path(__file__).parent / '.env'
if not env_path.exists():
    env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)


def _origins(value):
    origins = [origin.strip() for origin in value.split(',') if origin.strip()]
    if not origins or origins == ['*']:
        return '*'
    return origins


class Config:
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Comma separated list, '*' lets any frontend call the API
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', '*'))

    # AI summary; the endpoint answers 503 while no key is configured
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-4o-mini')
    OPENAI_MAX_TOKENS = int(os.environ.get('OPENAI_MAX_TOKENS', 300))
    OPENAI_TEMPERATURE = float(os.environ.get('OPENAI_TEMPERATURE', 0.2))
    OPENAI_TIMEOUT_SECONDS = float(os.environ.get('OPENAI_TIMEOUT_SECONDS', 30))

    PORT = int(os.environ.get('PORT', 5000))


class TestConfig(Config):
    __test__ = False  # not a pytest class
    TESTING = True
    OPENAI_API_KEY = None
    CORS_ORIGINS = '*'
