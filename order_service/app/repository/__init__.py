from .product_replica_repository import ReplicaStore, SqlAlchemyReplicaStore

__all__ = ["ReplicaStore", "SqlAlchemyReplicaStore"]
