from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()


def _score_points():
    """Points credited per task status, overridable from the environment."""
    return {
        'FIXED': int(os.getenv('SCORE_FIXED', 5)),
        'FALSE_POSITIVE': int(os.getenv('SCORE_FALSE_POSITIVE', 3)),
        'ALREADY_FIXED': int(os.getenv('SCORE_ALREADY_FIXED', 3)),
        'TOO_HARD': int(os.getenv('SCORE_TOO_HARD', 1)),
        'SKIPPED': int(os.getenv('SCORE_SKIPPED', 0)),
    }


def create_app(config_name='development'):
    app = Flask(__name__)

    # Config
    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
    else:
        app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv(
            'DATABASE_URL',
            'sqlite:///mapreview.db'
        )
        # Render/Heroku style URLs use the old scheme
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
            app.config['SQLALCHEMY_DATABASE_URI'] = app.config['SQLALCHEMY_DATABASE_URI'].replace(
                'postgres://', 'postgresql://', 1
            )

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 2592000))
    app.config['SCORE_POINTS'] = _score_points()

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    CORS(app)

    # Import models so create_all sees every table
    from mapreview import models  # noqa: F401

    with app.app_context():
        db.create_all()

    from mapreview.errors import register_error_handlers
    register_error_handlers(app)

    from mapreview.routes import register_routes
    register_routes(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    return app
