from flask_migrate import Migrate

migrate = Migrate()


def init_migrations(app, db):
    """Inicializar el soporte de migraciones en la aplicación."""
    # render_as_batch para que ALTER TABLE funcione en SQLite
    migrate.init_app(app, db, render_as_batch=True)
