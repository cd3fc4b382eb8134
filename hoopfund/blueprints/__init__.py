from __future__ import annotations

from flask import Flask


def register_blueprints(app: Flask) -> None:
    from .admin import bp as admin_bp
    from .api import create_api_blueprint
    from .health import bp as health_bp
    from .media import bp as media_bp
    from .payments import bp as payments_bp
    from .tournaments import bp as tournaments_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(create_api_blueprint(), url_prefix="/api")
    app.register_blueprint(admin_bp)
    app.register_blueprint(tournaments_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(media_bp)
