import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Safely parse boolean-like environment variables."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


def env_int(name: str, default: int) -> int:
    """Parse integer environment variables, falling back to the default on garbage."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default

"""
Application Configuration Module

This module contains all configuration settings for the site backend, including
configurations for development, testing, and production environments.
"""

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

MB = 1024 * 1024


class Config:
    """
    Base Configuration Class

    This class defines the basic configuration parameters required by the application.
    All environment-specific configuration classes inherit from this class.
    """
    # Basic Flask Configuration
    DEBUG = False
    TESTING = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_AS_ASCII = False

    # Core Settings
    SECRET_KEY = os.environ.get('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///homesite.db')
    TIMEZONE = os.environ.get('TIMEZONE', 'UTC')
    LOG_FILE = os.environ.get('LOG_FILE', 'app.log')
    VERSION = os.environ.get('APP_VERSION', '1.0.0')

    # JSON API only; forms are validated without CSRF tokens
    WTF_CSRF_ENABLED = False

    # HTTPS Configuration
    FORCE_HTTPS = env_bool('FORCE_HTTPS', False)
    PREFERRED_URL_SCHEME = 'https' if FORCE_HTTPS else 'http'

    # Blog content
    BLOG_CATEGORIES = ('tech', 'essay', 'life', 'project')
    EXCERPT_LENGTH = 200
    READING_SPEED_CPM = 300  # characters per minute

    # Media uploads
    MEDIA_STORAGE = os.environ.get('MEDIA_STORAGE', 'inline')  # 'inline' or 'filesystem'
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(BASE_DIR, 'uploads'))
    MAX_IMAGE_SIZE = env_int('MAX_IMAGE_SIZE', 5 * MB)
    MAX_VIDEO_SIZE = env_int('MAX_VIDEO_SIZE', 50 * MB)
    # Request body cap; multipart overhead on top of the largest allowed file
    MAX_CONTENT_LENGTH = MAX_VIDEO_SIZE + MB
    ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/webp', 'image/svg+xml')
    ALLOWED_VIDEO_TYPES = ('video/mp4', 'video/webm', 'video/quicktime', 'video/ogg')
    # Stored extension is chosen from the validated type, never the client's filename
    MEDIA_EXTENSIONS = {
        'image/jpeg': 'jpg',
        'image/png': 'png',
        'image/gif': 'gif',
        'image/webp': 'webp',
        'image/svg+xml': 'svg',
        'video/mp4': 'mp4',
        'video/webm': 'webm',
        'video/quicktime': 'mov',
        'video/ogg': 'ogv',
    }
    ORPHAN_MEDIA_TTL_HOURS = env_int('ORPHAN_MEDIA_TTL_HOURS', 24)

    # Danmaku wall
    DANMAKU_LIMIT = 50
    DANMAKU_CACHE_TIMEOUT = 5

    # Flask-Caching Configuration
    CACHE_TYPE = 'SimpleCache'
    CACHE_DEFAULT_TIMEOUT = 300

    @classmethod
    def init_app(cls, app):
        """
        初始化應用程式配置

        此方法在應用程式建立和配置後呼叫。
        子類別可以覆寫此方法來執行環境特定的初始化。

        Args:
            app: Flask 應用程式實例
        """
        if app.config.get('MEDIA_STORAGE') == 'filesystem':
            os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)


class DevelopmentConfig(Config):
    """Development Environment Configuration (本地開發環境)"""

    DEBUG = True
    # Use a fixed key for development to maintain sessions across restarts
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    db_url = os.environ.get('DATABASE_URL')
    # Development database - create instance directory if it doesn't exist
    if db_url:
        SQLALCHEMY_DATABASE_URI = db_url
    else:
        instance_dir = os.path.join(BASE_DIR, 'instance')
        os.makedirs(instance_dir, exist_ok=True)
        SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(instance_dir, 'homesite.db')

    FORCE_HTTPS = False  # Disable HTTPS enforcement in development

    @classmethod
    def init_app(cls, app):
        """Initialize development-specific settings"""
        super().init_app(app)

        # Enable detailed error pages in development
        app.config['PROPAGATE_EXCEPTIONS'] = True


class TestingConfig(Config):
    """Testing Configuration (自動化測試)"""

    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    FORCE_HTTPS = False
    MEDIA_STORAGE = 'inline'
    CACHE_TYPE = 'SimpleCache'


class ProductionConfig(Config):
    """Production Environment Configuration (線上生產環境)"""

    DEBUG = False

    # 正式環境數據庫配置
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    HTTPS_ENABLED = env_bool('HTTPS_ENABLED', True)
    FORCE_HTTPS = HTTPS_ENABLED
    PREFERRED_URL_SCHEME = 'https' if HTTPS_ENABLED else 'http'

    @classmethod
    def _validate_production_config(cls):
        """Validate that all required production settings are present"""
        required_vars = ['SECRET_KEY', 'DATABASE_URL']
        missing_vars = [var for var in required_vars if not os.environ.get(var)]

        if missing_vars:
            raise ValueError(f"Missing required environment variables for production: {', '.join(missing_vars)}")

        # Validate DATABASE_URL format
        from urllib.parse import urlparse
        parsed = urlparse(os.environ.get('DATABASE_URL'))
        if not parsed.scheme or not parsed.path:
            raise ValueError("Invalid DATABASE_URL format")

    @classmethod
    def init_app(cls, app):
        """Initialize production-specific settings"""
        super().init_app(app)

        cls._validate_production_config()

        if not cls.HTTPS_ENABLED:
            app.logger.warning('HTTPS enforcement is disabled in production. Set HTTPS_ENABLED=true once TLS is configured.')
        else:
            app.logger.info('HTTPS enforcement enabled; plain HTTP GET requests are redirected.')

        # Ensure log directory exists
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        # Add syslog handler for production logging
        import logging
        from logging.handlers import SysLogHandler

        try:
            syslog_handler = SysLogHandler(address='/dev/log')
            syslog_handler.setLevel(logging.WARNING)
            formatter = logging.Formatter(
                f'{app.name}: %(levelname)s in %(module)s: %(message)s'
            )
            syslog_handler.setFormatter(formatter)
            app.logger.addHandler(syslog_handler)
        except OSError as e:
            app.logger.warning(f"Could not setup syslog handler: {e}")

# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """
    Get configuration class based on environment

    Args:
        config_name (str): Configuration name ('development', 'testing', 'production')

    Returns:
        Config: Configuration class
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')

    config_class = config.get(config_name, config['default'])

    # Validate configuration class
    if not issubclass(config_class, Config):
        raise ValueError(f"Invalid configuration class: {config_class}")

    return config_class
