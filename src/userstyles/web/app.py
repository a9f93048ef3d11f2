from __future__ import annotations

from flask import Flask

from userstyles.config import UserstylesConfig
from userstyles.registry import Registry


def create_app(
    registry: Registry | None = None,
    config: UserstylesConfig | None = None,
    settings: dict | None = None,
) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    app.config.update(settings or {})

    if registry is None:
        from userstyles.runner import UserstylesRunner

        runner = UserstylesRunner(config or UserstylesConfig.from_env())
        registry = runner.initialize()
        registry.reload()
        app.extensions["runner"] = runner

    app.extensions["registry"] = registry

    from userstyles.web.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    return app
