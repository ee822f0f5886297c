# crmsync/routes/__init__.py
from __future__ import annotations


def register_routes(app):
    # Importa y registra blueprints aquí para evitar imports circulares
    from crmsync.routes.sync import bp as sync_bp
    app.register_blueprint(sync_bp)

    from crmsync.routes.admin import bp as admin_bp
    app.register_blueprint(admin_bp)

    from crmsync.routes.activities import bp as activities_bp
    app.register_blueprint(activities_bp)

    from crmsync.routes.pages import bp as pages_bp
    app.register_blueprint(pages_bp)
