from typing import Optional, Dict, Any, List
import os
from dotenv import load_dotenv
from rich.console import Console
import keyring
import logging

logger = logging.getLogger(__name__)

console = Console()

KEYRING_SERVICE = 'timelens'


class ConfigManager:
    """Manage application configuration and environment variables"""

    def __init__(self, env_file: str = None):
        """Initialize config manager"""
        if env_file:
            self.env_file = env_file
        else:
            # Project root is two levels up from this file
            project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
            self.env_file = os.path.join(project_root, '.env')
            logger.debug(f"Looking for .env file at: {self.env_file}")

        self.config = {}
        self.load_config()

    def load_config(self):
        """Load configuration from environment and .env file"""
        if os.path.exists(self.env_file):
            logger.info(f"Loading environment variables from {self.env_file}")
            # Values already set in the process environment win
            load_dotenv(self.env_file, override=False)

        self.config['app'] = self._load_app_config()
        self.config['openai'] = self._load_openai_config()
        self.config['google'] = self._load_google_config()
        self.config['session'] = self._load_session_config()
        self.config['server'] = self._load_server_config()
        self.config['development'] = self._load_dev_config()

    def _load_app_config(self) -> Dict[str, Any]:
        """Load application settings"""
        return {
            'timezone': os.getenv('TIMEZONE', 'UTC'),
            'database_url': os.getenv('DATABASE_URL', 'sqlite://'),
            'analytics_days': int(os.getenv('ANALYTICS_DAYS', 7)),
            'demo_username': os.getenv('DEMO_USERNAME', 'demo@example.com').strip(),
        }

    def _load_openai_config(self) -> Dict[str, Any]:
        """Load OpenAI configuration"""
        return {
            'api_key': os.getenv('OPENAI_API_KEY') or self._get_secret('openai_api_key'),
            'model': os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            'timeout': float(os.getenv('OPENAI_TIMEOUT', 10.0)),
        }

    def _load_google_config(self) -> Dict[str, Any]:
        """Load Google OAuth client settings used to refresh imported tokens"""
        return {
            'client_id': os.getenv('GOOGLE_CLIENT_ID') or self._get_secret('google_client_id'),
            'client_secret': os.getenv('GOOGLE_CLIENT_SECRET') or self._get_secret('google_client_secret'),
        }

    def _load_session_config(self) -> Dict[str, Any]:
        return {
            'secret_key': os.getenv('SESSION_SECRET', 'dev-session-secret'),
            'max_age': int(os.getenv('SESSION_MAX_AGE', 24 * 60 * 60)),
        }

    def _load_server_config(self) -> Dict[str, Any]:
        return {
            'host': os.getenv('HOST', '0.0.0.0'),
            'port': int(os.getenv('PORT', 8000)),
        }

    def _load_dev_config(self) -> Dict[str, Any]:
        """Load development settings"""
        return {
            'debug': self._parse_bool(os.getenv('DEBUG', 'false')),
            'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
        }

    def _parse_bool(self, value: str) -> bool:
        """Parse string boolean value"""
        return str(value).lower() in ('true', '1', 'yes', 'on')

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        parts = key.split('.')
        value = self.config
        for part in parts:
            if isinstance(value, dict):
                value = value.get(part)
            else:
                return default
        return value if value is not None else default

    def missing_settings(self) -> List[str]:
        """List recommended settings that are not configured"""
        recommended = {
            'openai.api_key': 'OpenAI API key enables AI categorization (keyword matching is used without it)',
        }
        missing = [f"- {key}: {message}" for key, message in recommended.items() if not self.get(key)]

        if not self.get('development.debug') and self.get('session.secret_key') == 'dev-session-secret':
            missing.append("- session.secret_key: SESSION_SECRET should be set outside development")
        return missing

    def validate(self) -> bool:
        """Validate configuration, printing anything that is missing"""
        missing = self.missing_settings()
        if missing:
            console.print("[bold yellow]Configuration warnings:[/bold yellow]")
            for msg in missing:
                console.print(msg)
            return False

        console.print("[bold green]Configuration looks good.[/bold green]")
        return True

    def save_secret(self, key: str, value: str):
        """Save secret to system keyring"""
        if value:
            keyring.set_password(KEYRING_SERVICE, key, value)

    def _get_secret(self, key: str) -> Optional[str]:
        """Get secret from system keyring"""
        try:
            return keyring.get_password(KEYRING_SERVICE, key)
        except Exception as e:
            logger.debug(f"Keyring lookup for {key} failed: {e}")
            return None

    def get_openai_key(self) -> Optional[str]:
        """Get OpenAI API key"""
        return self.get('openai.api_key')

    def get_google_credentials(self) -> Dict[str, str]:
        """Get Google OAuth client credentials"""
        return {
            'client_id': self.get('google.client_id'),
            'client_secret': self.get('google.client_secret')
        }
