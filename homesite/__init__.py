import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify, request, redirect
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_caching import Cache
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import get_config

# 初始化擴充套件
db = SQLAlchemy()
migrate = Migrate()
cache = Cache()


def configure_logging(app: 'Flask') -> None:
    """根據環境配置應用程式日誌"""
    formatter = logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    )
    if app.testing:
        # 測試環境交給 pytest 擷取日誌
        app.logger.setLevel(logging.DEBUG)
    elif app.debug:
        # 開發環境日誌 - 控制台輸出
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(logging.DEBUG)
        app.logger.addHandler(console_handler)
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('Development logging configured')
    else:
        # 生產環境日誌 - 檔案輸出與輪替
        log_file = app.config.get('LOG_FILE', 'logs/app.log')

        # 確保日誌目錄存在
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            try:
                os.makedirs(log_dir, exist_ok=True)
            except OSError as e:
                app.logger.error(f"Failed to create log directory {log_dir}: {e}. Falling back to 'app.log'.")
                # 回退到當前目錄
                log_file = 'app.log'

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Production logging configured')


def register_blueprints(app: 'Flask') -> None:
    """註冊所有應用程式藍圖"""
    from homesite.routes.public import bp as public_bp
    from homesite.routes.blog import bp as blog_bp
    from homesite.routes.comments import bp as comments_bp
    from homesite.routes.media import bp as media_bp
    from homesite.routes.danmaku import bp as danmaku_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(blog_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(media_bp)
    app.register_blueprint(danmaku_bp)

    app.logger.info('All blueprints registered successfully')


def setup_security_headers(app: 'Flask') -> None:
    """配置安全相關的請求處理器"""

    @app.before_request
    def before_request():
        """在生產環境中強制使用 HTTPS（僅在正確的反向代理器後面）"""
        if not app.debug and not app.testing and app.config.get('FORCE_HTTPS', False):
            if not request.is_secure and request.headers.get('X-Forwarded-Proto') != 'https':
                if request.method == 'GET':
                    return redirect(request.url.replace('http://', 'https://', 1), code=301)

    @app.after_request
    def set_security_headers(response):
        """為所有回應新增安全標頭"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # HSTS 標頭（僅在生產環境）
        if not app.debug and app.config.get('FORCE_HTTPS', False):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains; preload'

        return response


def register_error_handlers(app: 'Flask') -> None:
    """為應用程式註冊錯誤處理器，所有錯誤皆回傳 JSON"""
    from homesite.errors import ContentError, UnsupportedMediaError

    @app.errorhandler(ContentError)
    def content_error(error):
        """處理服務層拋出的錯誤"""
        if error.status_code >= 500:
            app.logger.error(f"{error.error_type} error on {request.method} {request.path}: {error.message}")
        else:
            app.logger.info(f"{error.error_type} on {request.method} {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(error):
        """請求本體超過 MAX_CONTENT_LENGTH，視同檔案過大"""
        limit = request.max_content_length or 0
        return content_error(UnsupportedMediaError(f"File too large: request exceeds {limit} bytes"))

    @app.errorhandler(HTTPException)
    def http_error(error):
        """處理 404、405 等 HTTP 錯誤"""
        if error.code == 404:
            app.logger.info(f"Page not found: {request.url}")
        return jsonify({
            'success': False,
            'message': error.description,
            'error_type': error.name.lower().replace(' ', '_'),
        }), error.code

    @app.errorhandler(500)
    def internal_error(error):
        """處理 500 伺服器內部錯誤"""
        db.session.rollback()
        app.logger.error(f"Server Error: {error}")
        return jsonify({
            'success': False,
            'message': 'Internal server error',
            'error_type': 'internal',
        }), 500


def create_app(config_name: str = None, config_class = None) -> 'Flask':
    """
    Application factory function

    Args:
        config_name (str): Configuration environment name
        config_class: Configuration class (overrides config_name if provided)

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize configuration
    config_class.init_app(app)

    # Initialize core extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)

    # Configure application components
    configure_logging(app)
    register_blueprints(app)
    setup_security_headers(app)
    register_error_handlers(app)

    from homesite.cli import register_commands
    register_commands(app)

    app.logger.info(f'Application created with {config_name or config_class.__name__} configuration')
    return app


def create_tables(app: 'Flask') -> None:
    """
    Create database tables

    WARNING: Suitable only for development or one-time initialization.
    Use Flask-Migrate (flask db init/migrate/upgrade) to manage schema
    changes in production.

    Args:
        app: Flask application instance
    """
    # 確保模型已註冊到 metadata
    from homesite import models  # noqa: F401

    with app.app_context():
        try:
            db.create_all()
            app.logger.info('Database tables created successfully')
        except Exception as e:
            app.logger.error(f'Error creating database tables: {e}')
            raise
