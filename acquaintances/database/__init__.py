"""
The `database` package is responsible for all interactions with the verification store's database.
It provides configuration, entity definitions, data access, and the business layer
built on top of them.

Contents:
    - config:
        Settings (message length, group mapping, table names) and the SQLAlchemy
        engine / session / declarative base bootstrap.

    - entities:
        SQLAlchemy entity models for verifications and their group tags.

    - daos:
        Data Access Objects (DAOs) providing queries and CRUD operations for the entities.

    - core:
        The verification store (lifecycle and tagging) and the relationship
        query engine (listings, verifier sets, counts).

    - helpers:
        Transaction management (`@transactional`) and pagination.
"""
