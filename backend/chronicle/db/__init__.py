from chronicle.db.gateway import (
    PersistenceGateway, SQLAlchemyGateway, gateway_scope, make_key, parse_key, COLLECTIONS
)

__all__ = [
    "PersistenceGateway", "SQLAlchemyGateway", "gateway_scope",
    "make_key", "parse_key", "COLLECTIONS",
]
