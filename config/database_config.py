"""
Backend store configuration for TastyTray application.

Chooses between the local SQLite store and the hosted Supabase PostgreSQL
store based on configuration.
"""

from typing import Any, Dict, Optional

from utils import Config, get_config, get_logger

logger = get_logger(__name__)

SUPPORTED_BACKENDS = ('sqlite', 'supabase')


class DatabaseConfig:
    """Backend store configuration manager"""

    @staticmethod
    def get_database_config(config: Optional[Config] = None) -> Dict[str, Any]:
        """Get backend store configuration"""
        config = config or get_config()
        backend = config.backend_type

        if backend == 'supabase' and config.database_url:
            return {
                'type': 'supabase',
                'url': config.database_url,
                'description': 'Supabase PostgreSQL'
            }

        if backend == 'supabase':
            logger.warning("TASTY_BACKEND=supabase but DATABASE_URL is empty; using SQLite")
        elif backend not in SUPPORTED_BACKENDS:
            logger.warning(f"Unknown backend '{backend}'; using SQLite")

        return {
            'type': 'sqlite',
            'path': config.database_path,
            'description': 'Local SQLite database'
        }


def get_backend_store(config: Optional[Config] = None):
    """Create the backend store selected by configuration"""
    db_config = DatabaseConfig.get_database_config(config)

    if db_config['type'] == 'supabase':
        from services.postgresql_service import get_postgresql_service
        return get_postgresql_service(db_config['url'])

    from services.database_service import DatabaseService
    return DatabaseService(db_config['path'])


def get_database_info(config: Optional[Config] = None) -> Dict[str, Any]:
    """Get backend store info for display"""
    db_config = DatabaseConfig.get_database_config(config)
    if db_config['type'] == 'supabase':
        url = db_config['url']
        host = url.split('@')[-1].split('/')[0] if '@' in url else 'configured host'
        location = f"Remote ({host})"
    else:
        location = f"Local file ({db_config['path']})"

    return {
        'type': db_config['type'],
        'description': db_config['description'],
        'location': location
    }
