"""
Unit tests for ProductEventReconciler.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, Mock, patch

import pytest
from sqlalchemy.exc import OperationalError

from order_service.app.events.base import MalformedMessageError, ReconcileOutcome
from order_service.app.events.consumers import ProductEventReconciler
from order_service.app.events.schemas import ProductMessage
from order_service.app.middleware.common.operation_logging import (
    OperationLoggingOptions,
)
from order_service.app.repository.product_replica_repository import ReplicaStore


async def seed(replica_store, product_record, product_id=10, stock=5):
    await replica_store.insert_snapshot(
        ProductMessage.from_bytes(
            product_record("INITIAL_LOAD", product_id=product_id, stock=stock)
        )
    )


class TestProductEventReconciler:
    """Reconciler against a real SQLite replica."""

    @pytest.fixture
    def reconciler(self, replica_store):
        return ProductEventReconciler(replica_store)

    @pytest.mark.asyncio
    async def test_snapshot_updates_existing_replica_stock(
        self, reconciler, replica_store, product_record
    ):
        await seed(replica_store, product_record, stock=5)

        outcome = await reconciler.process(product_record("PRODUCT_UPDATED", stock=2))

        assert outcome is ReconcileOutcome.APPLIED
        replica = await replica_store.get(10)
        assert replica.stock == 2
        assert replica.last_event_type == "PRODUCT_UPDATED"

    @pytest.mark.asyncio
    async def test_initial_load_updates_existing_replica(
        self, reconciler, replica_store, product_record
    ):
        await seed(replica_store, product_record, stock=5)

        outcome = await reconciler.process(product_record("INITIAL_LOAD", stock=11))

        assert outcome is ReconcileOutcome.APPLIED
        assert (await replica_store.get(10)).stock == 11

    @pytest.mark.asyncio
    async def test_applying_same_record_twice_matches_applying_once(
        self, reconciler, replica_store, product_record
    ):
        await seed(replica_store, product_record, stock=5)
        record = product_record("PRODUCT_UPDATED", stock=3)

        first = await reconciler.process(record, partition=0, offset=7)
        second = await reconciler.process(record, partition=0, offset=7)

        assert first is ReconcileOutcome.APPLIED
        assert second is ReconcileOutcome.APPLIED
        assert (await replica_store.get(10)).stock == 3
        assert await replica_store.count() == 1

    @pytest.mark.asyncio
    async def test_snapshot_for_unknown_product_is_skipped(
        self, reconciler, replica_store, product_record
    ):
        outcome = await reconciler.process(
            product_record("PRODUCT_CREATED", product_id=42, stock=1)
        )

        assert outcome is ReconcileOutcome.SKIPPED
        assert await replica_store.get(42) is None

    @pytest.mark.asyncio
    async def test_product_created_upstream_never_appears_without_create_policy(
        self, reconciler, replica_store, product_record
    ):
        """A product that only exists upstream stays absent through later updates."""
        created = await reconciler.process(
            product_record("PRODUCT_CREATED", product_id=42, stock=1)
        )
        updated = await reconciler.process(
            product_record("PRODUCT_UPDATED", product_id=42, stock=4)
        )

        assert created is ReconcileOutcome.SKIPPED
        assert updated is ReconcileOutcome.SKIPPED
        assert await replica_store.get(42) is None
        assert await replica_store.count() == 0

    @pytest.mark.asyncio
    async def test_create_on_missing_inserts_full_snapshot(
        self, replica_store, product_record
    ):
        reconciler = ProductEventReconciler(replica_store, create_on_missing=True)

        outcome = await reconciler.process(
            product_record("PRODUCT_CREATED", product_id=42, stock=1)
        )

        assert outcome is ReconcileOutcome.APPLIED
        replica = await replica_store.get(42)
        assert replica.name == "Trail Runner"
        assert replica.price == Decimal("89.90")
        assert replica.category == "clothes"
        assert replica.brand == "Northwind"
        assert replica.stock == 1

    @pytest.mark.asyncio
    async def test_created_updated_deleted_with_duplicates_ends_absent(
        self, replica_store, product_record
    ):
        reconciler = ProductEventReconciler(replica_store, create_on_missing=True)
        sequence = [
            product_record("PRODUCT_CREATED", stock=10),
            product_record("PRODUCT_CREATED", stock=10),
            product_record("PRODUCT_UPDATED", stock=7),
            product_record("PRODUCT_UPDATED", stock=7),
            product_record("PRODUCT_DELETED"),
            product_record("PRODUCT_DELETED"),
        ]

        outcomes = [await reconciler.process(record) for record in sequence]

        assert outcomes == [
            ReconcileOutcome.APPLIED,
            ReconcileOutcome.APPLIED,
            ReconcileOutcome.APPLIED,
            ReconcileOutcome.APPLIED,
            ReconcileOutcome.APPLIED,
            ReconcileOutcome.SKIPPED,
        ]
        assert await replica_store.get(10) is None

    @pytest.mark.asyncio
    async def test_delete_of_missing_replica_is_a_noop(
        self, reconciler, replica_store, product_record
    ):
        first = await reconciler.process(product_record("PRODUCT_DELETED", product_id=99))
        second = await reconciler.process(
            product_record("PRODUCT_DELETED", product_id=99)
        )

        assert first is ReconcileOutcome.SKIPPED
        assert second is ReconcileOutcome.SKIPPED
        assert await replica_store.count() == 0

    @pytest.mark.asyncio
    async def test_delete_removes_existing_replica(
        self, reconciler, replica_store, product_record
    ):
        await seed(replica_store, product_record)

        outcome = await reconciler.process(product_record("PRODUCT_DELETED"))

        assert outcome is ReconcileOutcome.APPLIED
        assert await replica_store.get(10) is None

    @pytest.mark.asyncio
    async def test_malformed_record_raises(self, reconciler):
        with pytest.raises(MalformedMessageError):
            await reconciler.process(b"{not json")


class TestProductEventReconcilerWithMockStore:
    """Reconciler paths that need control over the store."""

    @pytest.fixture
    def mock_store(self):
        store = Mock(spec=ReplicaStore)
        store.upsert_stock = AsyncMock(return_value=True)
        store.insert_snapshot = AsyncMock()
        store.delete = AsyncMock(return_value=True)
        return store

    @pytest.fixture
    def reconciler(self, mock_store):
        return ProductEventReconciler(
            mock_store,
            operation_options=OperationLoggingOptions(audit_enabled=False),
        )

    @pytest.mark.asyncio
    async def test_unknown_event_type_is_rejected_without_touching_store(
        self, reconciler, mock_store, product_record
    ):
        outcome = await reconciler.process(product_record("FOO"))

        assert outcome is ReconcileOutcome.REJECTED
        mock_store.upsert_stock.assert_not_called()
        mock_store.insert_snapshot.assert_not_called()
        mock_store.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_snapshot_passes_event_type_to_store(
        self, reconciler, mock_store, product_record
    ):
        await reconciler.process(product_record("PRODUCT_CREATED", stock=4))

        mock_store.upsert_stock.assert_awaited_once_with(
            10, 4, event_type="PRODUCT_CREATED"
        )

    @pytest.mark.asyncio
    async def test_snapshot_without_stock_is_rejected(
        self, reconciler, mock_store, product_record
    ):
        outcome = await reconciler.process(product_record("PRODUCT_UPDATED", stock=None))

        assert outcome is ReconcileOutcome.REJECTED
        mock_store.upsert_stock.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_transient_apply_error_is_rejected(
        self, reconciler, mock_store, product_record
    ):
        mock_store.upsert_stock.side_effect = RuntimeError("constraint violated")

        outcome = await reconciler.process(product_record("PRODUCT_UPDATED"))

        assert outcome is ReconcileOutcome.REJECTED

    @pytest.mark.asyncio
    async def test_transient_store_error_propagates_for_retry(
        self, reconciler, mock_store, product_record
    ):
        mock_store.delete.side_effect = OperationalError(
            "DELETE FROM product_replicas", {}, Exception("database is locked")
        )

        with pytest.raises(OperationalError):
            await reconciler.process(product_record("PRODUCT_DELETED"))

    @pytest.mark.parametrize(
        "event_type, message",
        [
            ("PRODUCT_UPDATED", "Replica stock updated"),
            ("INITIAL_LOAD", "Replica stock updated"),
            ("PRODUCT_DELETED", "Replica deleted"),
        ],
    )
    @pytest.mark.asyncio
    async def test_applied_log_names_the_event_type(
        self, reconciler, product_record, event_type, message
    ):
        with patch("order_service.app.events.consumers.logger") as mock_logger:
            outcome = await reconciler.process(product_record(event_type))

        assert outcome is ReconcileOutcome.APPLIED
        applied = [
            call for call in mock_logger.info.call_args_list if call.args[0] == message
        ]
        assert len(applied) == 1
        assert applied[0].kwargs["extra"]["product_event_type"] == event_type

    @pytest.mark.asyncio
    async def test_insert_log_names_the_event_type(self, mock_store, product_record):
        mock_store.upsert_stock.return_value = False
        reconciler = ProductEventReconciler(
            mock_store,
            create_on_missing=True,
            operation_options=OperationLoggingOptions(audit_enabled=False),
        )

        with patch("order_service.app.events.consumers.logger") as mock_logger:
            await reconciler.process(product_record("PRODUCT_CREATED", product_id=42))

        applied = [
            call
            for call in mock_logger.info.call_args_list
            if call.args[0] == "Replica created from snapshot"
        ]
        assert applied[0].kwargs["extra"]["product_event_type"] == "PRODUCT_CREATED"
