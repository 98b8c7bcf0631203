import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_SUPABASE_URL = os.getenv('SUPABASE_URL')
_SUPABASE_KEY = os.getenv('SUPABASE_KEY') or os.getenv('SUPABASE_SERVICE_ROLE_KEY')

_LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'gemini').strip().lower()

_GEMINI_API_KEY = os.getenv('GEMINI_API_KEY')
_GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-1.5-flash')
_GEMINI_API_BASE = os.getenv('GEMINI_API_BASE', 'https://generativelanguage.googleapis.com/v1beta')

_ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY') or os.getenv('CLAUDE_API_KEY')
_CLAUDE_MODEL = os.getenv('CLAUDE_MODEL', 'claude-3-5-haiku-20241022')

_PDF_SERVICE_URL = os.getenv('PDF_SERVICE_URL')
_PDF_SERVICE_USER_ID = os.getenv('PDF_SERVICE_USER_ID')
_PDF_SERVICE_API_KEY = os.getenv('PDF_SERVICE_API_KEY')

_CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ALLOW_ORIGINS', '*').split(',')
    if origin.strip()
]


class Config:
    """Central configuration for the health journal service."""

    SUPABASE_URL = _SUPABASE_URL
    SUPABASE_KEY = _SUPABASE_KEY

    LLM_PROVIDER = _LLM_PROVIDER

    GEMINI_API_KEY = _GEMINI_API_KEY
    GEMINI_MODEL = _GEMINI_MODEL
    GEMINI_API_BASE = _GEMINI_API_BASE

    ANTHROPIC_API_KEY = _ANTHROPIC_API_KEY
    CLAUDE_MODEL = _CLAUDE_MODEL

    LLM_TIMEOUT_SECONDS = float(os.getenv('LLM_TIMEOUT_SECONDS', '30'))
    LLM_MAX_RETRIES = int(os.getenv('LLM_MAX_RETRIES', '1'))
    LLM_RETRY_BACKOFF_SECONDS = float(os.getenv('LLM_RETRY_BACKOFF_SECONDS', '0.5'))

    PDF_SERVICE_URL = _PDF_SERVICE_URL
    PDF_SERVICE_USER_ID = _PDF_SERVICE_USER_ID
    PDF_SERVICE_API_KEY = _PDF_SERVICE_API_KEY
    PDF_TIMEOUT_SECONDS = float(os.getenv('PDF_TIMEOUT_SECONDS', '20'))

    HTTP_MAX_CONNECTIONS = int(os.getenv('HTTP_MAX_CONNECTIONS', '50'))
    HTTP_MAX_KEEPALIVE = int(os.getenv('HTTP_MAX_KEEPALIVE', '10'))

    CORS_ALLOW_ORIGINS = _CORS_ALLOW_ORIGINS


settings = Config()
