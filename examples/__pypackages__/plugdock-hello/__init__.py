"""Example plugdock plugin that greets the host application."""

__version__ = "0.1.0"


def load(app):
    app.logger.info("Hello from plugdock-hello")
