from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress
import logging

# Load environment variables early so config is available for blueprint creation
load_dotenv()

from quizboard.config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()


def create_app() -> Flask:
    """
    Application factory for the Flask app.
    Loads environment variables, configures the database,
    and registers the quiz blueprint.
    """
    # Re-initialize config to ensure latest .env values are loaded
    from quizboard.config import Config
    global config
    config = Config()

    # Validate configuration
    config.validate()

    app = Flask(__name__)

    app.config["SECRET_KEY"] = config.SECRET_KEY
    db_uri = config.SQLALCHEMY_DATABASE_URI
    if config.uses_mysql:
        if "?" not in db_uri:
            db_uri += "?charset=utf8mb4"
        # Database connection pooling for MySQL
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": 5,
                "charset": "utf8mb4",
            }
        }
    app.config["SQLALCHEMY_DATABASE_URI"] = db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO

    # Response compression settings
    app.config["COMPRESS_MIMETYPES"] = ['application/json']
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500
    app.config["SESSION_COOKIE_SECURE"] = config.SESSION_COOKIE_SECURE
    app.config["SESSION_COOKIE_HTTPONLY"] = config.SESSION_COOKIE_HTTPONLY
    app.config["SESSION_COOKIE_SAMESITE"] = config.SESSION_COOKIE_SAMESITE
    app.config["ADMIN_USER_TYPE"] = config.ADMIN_USER_TYPE

    app.logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    compress.init_app(app)

    from quizboard.security import init_security
    init_security(app)

    @login_manager.user_loader
    def load_user(user_id):
        from quizboard.auth.models import User
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        from quizboard.security import SecurityLogger
        SecurityLogger.log_unauthorized_access()
        return jsonify({'success': False, 'message': 'Authentication required'}), 401

    from quizboard.errors import register_error_handlers
    register_error_handlers(app, db)

    # Register quiz blueprint
    from quizboard.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    # Create tables if they do not exist
    with app.app_context():
        from quizboard.auth import models as auth_models  # noqa: F401
        from quizboard.quiz import models as quiz_models  # noqa: F401
        db.create_all()

    return app
