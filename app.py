import os
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from extensions import db, migrate, cors
from errors import register_error_handlers
from models import utcnow

# Load environment variables from .env file
load_dotenv()

# Set up logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///guest_management.db"
DEV_JWT_SECRET = "dev-jwt-secret-change-me-before-deploying"


def env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def database_url_from_env():
    database_url = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
    # Fix for Heroku/Render postgres:// URLs (should be postgresql://)
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    return database_url


def configure(app, test_config=None):
    app.secret_key = os.environ.get("SESSION_SECRET", "guest_management_secret_key")

    database_url = database_url_from_env()
    app.config["SQLALCHEMY_DATABASE_URI"] = database_url
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if database_url.startswith("postgresql"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_recycle": 300,
            "pool_pre_ping": True,
        }

    jwt_secret = os.environ.get("JWT_SECRET_KEY")
    if not jwt_secret:
        logger.warning("JWT_SECRET_KEY not set in environment. Using development key.")
        jwt_secret = DEV_JWT_SECRET
    app.config["JWT_SECRET_KEY"] = jwt_secret
    app.config["ACCESS_TOKEN_EXPIRY_HOURS"] = float(os.environ.get("ACCESS_TOKEN_EXPIRY_HOURS", 1))

    app.config["SCHEDULER_ENABLED"] = env_flag("SCHEDULER_ENABLED", True)
    app.config["AUTO_CHECKOUT_GRACE_MINUTES"] = float(os.environ.get("AUTO_CHECKOUT_GRACE_MINUTES", 0))
    app.config["SEED_INITIAL_DATA"] = env_flag("SEED_INITIAL_DATA", True)

    if test_config:
        app.config.update(test_config)


def register_blueprints(app):
    from access_log_routes import access_log_bp
    from activity_log_routes import activity_log_bp
    from admin_routes import admin_bp, auth_bp
    from feedback_routes import feedback_bp
    from guest_routes import guest_bp
    from mac_address_routes import mac_address_bp
    from notification_routes import notification_bp
    from rfid_routes import rfid_bp
    from room_routes import room_bp
    from service_request_routes import service_request_bp

    for blueprint in (auth_bp, guest_bp, admin_bp, rfid_bp, service_request_bp, room_bp,
                      access_log_bp, activity_log_bp, feedback_bp, notification_bp,
                      mac_address_bp):
        app.register_blueprint(blueprint)


def create_app(test_config=None):
    # create the app
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)
    configure(app, test_config)

    # Initialize the extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})

    register_error_handlers(app)
    register_blueprints(app)

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'success': True,
            'status': 'healthy',
            'message': 'Guest management API is running',
            'timestamp': utcnow().isoformat(),
            'scheduler_running': 'checkout_scheduler' in app.extensions,
        }), 200

    with app.app_context():
        # Import the models here so their tables will be created
        import models  # noqa: F401
        db.create_all()

        if app.config["SEED_INITIAL_DATA"]:
            from init_data import create_initial_data
            create_initial_data()

    from checkout_scheduler import init_scheduler
    init_scheduler(app)

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
