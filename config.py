import os, secrets
from dataclasses import dataclass, field
from typing import Any, Dict

from dotenv import load_dotenv


def _env_int(key:str, default:int) -> int:
    value : str = os.getenv(key, '')
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Settings:
    '''Read once at startup; there is no reload.'''
    database_url : str = 'sqlite:///data.db'
    host : str = '0.0.0.0'
    port : int = 8080
    page_size_limit : int = 100
    db_pool_timeout : int = 10
    log_level : str = 'INFO'
    secret_key : str = field(default_factory=lambda: secrets.token_hex(16))

    @classmethod
    def from_env(cls) -> 'Settings':
        load_dotenv()
        defaults : Settings = cls()
        return cls(
            database_url=os.getenv('DATABASE_URL') or defaults.database_url,
            host=os.getenv('HTTP_SERVER_HOST') or defaults.host,
            port=_env_int('HTTP_SERVER_PORT', defaults.port),
            page_size_limit=_env_int('PAGE_SIZE_LIMIT', defaults.page_size_limit),
            db_pool_timeout=_env_int('DB_POOL_TIMEOUT', defaults.db_pool_timeout),
            log_level=os.getenv('LOG_LEVEL') or defaults.log_level,
            secret_key=os.getenv('SECRET_KEY') or defaults.secret_key,
        )

    @property
    def server_address(self) -> str:
        return f'{self.host}:{self.port}'

    def flask_config(self) -> Dict[str, Any]:
        engine_options : Dict[str, Any] = {'pool_pre_ping': True}
        # Not every SQLite pool accepts pool_timeout; the driver's busy timeout bounds waits instead.
        if self.database_url.startswith('sqlite'):
            engine_options['connect_args'] = {'timeout': self.db_pool_timeout}
        else:
            engine_options['pool_timeout'] = self.db_pool_timeout
        return {
            'SECRET_KEY': self.secret_key,
            'SQLALCHEMY_DATABASE_URI': self.database_url,
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'SQLALCHEMY_ENGINE_OPTIONS': engine_options,
        }
