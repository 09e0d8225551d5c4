import asyncio
from datetime import datetime, timezone

from booking_engine.booking.applications.sync_booking import SyncBookingService
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.shared.domain.exception import OptimisticLockException
from booking_engine.shared.provider import ProviderUnavailableError


class TestSyncBookingService:
    def test_held_booking_cancelled_on_provider_becomes_cancelled(
        self, mock_repository, mock_provider, create_booking, create_remote_order
    ):
        """プロバイダ側でキャンセル済みなら cancelled に追従する"""
        # Arrange
        booking = create_booking(status=BookingStatus.HELD)
        mock_provider.get_order.return_value = create_remote_order(
            cancelled_at="2025-03-15T08:00:00Z",
            cancellation={"refund_amount": "120.00", "refund_currency": "USD"},
        )
        service = SyncBookingService(mock_repository, mock_provider)

        # Act
        result = asyncio.run(service.sync(booking))

        # Assert
        assert result.status == BookingStatus.CANCELLED
        assert "Auto-Sync: Cancelled on provider at 2025-03-15T08:00:00" in (
            result.admin_notes[-1]
        )
        assert result.airline_initiated_changes["cancellation"] == {
            "refund_amount": "120.00",
            "refund_currency": "USD",
        }
        mock_repository.update.assert_called_once_with(
            booking, expected_status=BookingStatus.HELD
        )

    def test_held_booking_with_documents_becomes_issued(
        self,
        mock_repository,
        mock_provider,
        create_booking,
        create_remote_order,
        issued_documents,
    ):
        booking = create_booking(status=BookingStatus.HELD)
        mock_provider.get_order.return_value = create_remote_order(
            documents=issued_documents, booking_reference="NEWPNR"
        )
        service = SyncBookingService(mock_repository, mock_provider)

        result = asyncio.run(service.sync(booking))

        assert result.status == BookingStatus.ISSUED
        assert result.pnr == "NEWPNR"
        assert result.documents[0].unique_identifier == "1234567890123"
        assert result.admin_notes[-1].endswith("Auto-Sync: Tickets issued on provider")

    def test_unchanged_remote_order_is_not_written(
        self, mock_repository, mock_provider, create_booking, create_remote_order
    ):
        """プロバイダ側に変化がなければ保存しない"""
        # Arrange
        deadline = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        booking = create_booking(status=BookingStatus.HELD, payment_deadline=deadline)
        updated_at = booking.updated_at
        mock_provider.get_order.return_value = create_remote_order(
            payment_required_by="2030-01-01T12:00:00Z"
        )
        service = SyncBookingService(mock_repository, mock_provider)

        # Act
        result = asyncio.run(service.sync(booking))

        # Assert
        assert result.status == BookingStatus.HELD
        assert result.updated_at == updated_at
        mock_repository.update.assert_not_called()

    def test_moved_deadline_is_written(
        self, mock_repository, mock_provider, create_booking, create_remote_order
    ):
        deadline = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        booking = create_booking(status=BookingStatus.HELD, payment_deadline=deadline)
        mock_provider.get_order.return_value = create_remote_order(
            payment_required_by="2030-01-02T12:00:00Z"
        )
        service = SyncBookingService(mock_repository, mock_provider)

        result = asyncio.run(service.sync(booking))

        assert result.payment_deadline == datetime(
            2030, 1, 2, 12, 0, tzinfo=timezone.utc
        )
        mock_repository.update.assert_called_once_with(
            booking, expected_status=BookingStatus.HELD
        )

    def test_fetch_failure_returns_booking_unchanged(
        self, mock_repository, mock_provider, create_booking
    ):
        """取得失敗時は最後に保存された状態をそのまま返す"""
        booking = create_booking(status=BookingStatus.HELD)
        mock_provider.get_order.side_effect = ProviderUnavailableError("timeout")
        service = SyncBookingService(mock_repository, mock_provider)

        result = asyncio.run(service.sync(booking))

        assert result is booking
        assert result.status == BookingStatus.HELD
        mock_repository.update.assert_not_called()

    def test_terminal_booking_is_not_synced(
        self, mock_repository, mock_provider, create_booking
    ):
        booking = create_booking(status=BookingStatus.CANCELLED)
        service = SyncBookingService(mock_repository, mock_provider)

        asyncio.run(service.sync(booking))

        mock_provider.get_order.assert_not_called()

    def test_booking_without_order_is_not_synced(
        self, mock_repository, mock_provider, create_booking
    ):
        booking = create_booking(status=BookingStatus.PROCESSING, order_id=None)
        service = SyncBookingService(mock_repository, mock_provider)

        asyncio.run(service.sync(booking))

        mock_provider.get_order.assert_not_called()

    def test_concurrent_update_reloads_stored_booking(
        self, mock_repository, mock_provider, create_booking, create_remote_order
    ):
        """楽観ロック競合時は保存済みの最新状態を返す"""
        booking = create_booking(status=BookingStatus.HELD)
        latest = create_booking(status=BookingStatus.CANCELLED)
        mock_provider.get_order.return_value = create_remote_order(
            cancelled_at="2025-03-15T08:00:00Z"
        )
        mock_repository.update.side_effect = OptimisticLockException()
        mock_repository.find_by_id.return_value = latest
        service = SyncBookingService(mock_repository, mock_provider)

        result = asyncio.run(service.sync(booking))

        assert result is latest

    def test_sync_many_preserves_order(
        self, mock_repository, mock_provider, create_booking, create_remote_order
    ):
        bookings = [
            create_booking(booking_id=f"booking-{i}", order_id=f"ord_{i}")
            for i in range(4)
        ]
        mock_provider.get_order.side_effect = lambda order_id: create_remote_order(
            order_id=order_id
        )
        service = SyncBookingService(mock_repository, mock_provider, concurrency=2)

        result = asyncio.run(service.sync_many(bookings))

        assert [str(b.id) for b in result] == [f"booking-{i}" for i in range(4)]
        assert mock_provider.get_order.call_count == 4
