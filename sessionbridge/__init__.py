"""sessionbridge: durable HTTP session storage over SQLAlchemy."""

__version__ = "1.0.0"
