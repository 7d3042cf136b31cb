"""Routes package for the map review application."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .bundles import bundles_bp
    from .tasks import tasks_bp
    from .challenges import challenges_bp

    app.register_blueprint(bundles_bp, url_prefix='/api/taskbundles')
    app.register_blueprint(tasks_bp, url_prefix='/api/tasks')
    app.register_blueprint(challenges_bp, url_prefix='/api/challenges')
