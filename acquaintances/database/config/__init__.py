"""
The `config` package provides two core building blocks for establishing and managing database connections.

Contents:
    - config: Configuration layer - strongly typed settings loaded from environment variables (with .env support), exposed through a singleton Settings object; also carries the message length limit and the group name → id mapping
    - connection_engine: Database layer - SQLAlchemy bootstrap that builds Engines and session factories, the shared MetaData, and the declarative base for ORM models

Together they provide environment-driven configuration and a clean ORM foundation.
"""
