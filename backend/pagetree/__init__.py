import click
from flask import Flask
from .config import config_by_name
from .extensions import db, migrate, jwt
from .api.v1 import v1_bp
from .errors import register_error_handlers
from .utils.cache import register_cache_receivers


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # -------------------------------------------------
    # Cache invalidation
    # -------------------------------------------------
    register_cache_receivers(app)

    # -------------------------------------------------
    # API Blueprints
    # -------------------------------------------------
    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    # -------------------------------------------------
    # CLI
    # -------------------------------------------------
    @app.cli.command("install-site")
    @click.option("--title", default="Home", help="Navigation title of the homepage.")
    def install_site_command(title):
        """Create the tables, default templates and the homepage."""
        from .application.cms.install import install_site

        db.create_all()
        homepage = install_site(site_title=title)
        click.echo(f"Homepage ready at page {homepage.id}")

    return app
