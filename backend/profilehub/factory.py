"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from profilehub.core.config import BaseConfig, engine_options, get_config
from profilehub.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Parameters
    ----------
    config:
        Config object, class or import string; defaults to the class selected
        by ``APP_ENV``.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", engine_options(app.config))

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers (client address for rate limiting) behind a reverse proxy
    if app.config.get("USE_PROXYFIX"):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)  # type: ignore[method-assign]

    from profilehub.core import extensions

    extensions.init_app(app)

    from profilehub.core import security

    security.init_app(app)

    init_logging(app)

    from profilehub.core import cors

    cors.init_app(app)

    from profilehub.api import init_app as init_api

    init_api(app)

    from profilehub.core import errors

    errors.init_app(app)

    return app
