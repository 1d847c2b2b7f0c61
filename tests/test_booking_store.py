"""Tests for the in-memory booking store."""

import asyncio

import pytest

from pixelperfect.schemas.booking_schema import BookingStatus, PaymentStatus
from pixelperfect.tools.booking import (
    BookingNotFoundError,
    BookingStore,
    InvalidStatusTransitionError,
    SlotUnavailableError,
    UnknownServiceError,
)
from pixelperfect.tools.payment import MockPaymentGateway, PaymentError
from tests.conftest import make_booking_data


class TestCreate:
    def test_create_assigns_id_and_timestamp(self, store):
        booking = store.create(make_booking_data())
        assert booking.id.startswith("BK-")
        assert booking.created_at is not None
        assert store.get(booking.id) == booking

    def test_create_starts_pending(self, store):
        booking = store.create(make_booking_data())
        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.payment_id is None

    def test_ids_are_unique(self, catalog):
        store = BookingStore(catalog, strict_slot_check=False)
        ids = {store.create(make_booking_data()).id for _ in range(50)}
        assert len(ids) == 50
        assert len(store) == 50

    def test_unknown_service_rejected(self, store):
        with pytest.raises(UnknownServiceError):
            store.create(make_booking_data(service_id="99"))
        assert len(store) == 0

    def test_store_without_catalog_accepts_any_service(self):
        store = BookingStore()
        booking = store.create(make_booking_data(service_id="99"))
        assert booking.service_id == "99"

    def test_all_keeps_creation_order(self, store):
        first = store.create(make_booking_data(time="09:00"))
        second = store.create(make_booking_data(time="13:00"))
        assert [b.id for b in store.all()] == [first.id, second.id]

    def test_for_client(self, store):
        mine = store.create(make_booking_data(client_id="a"))
        store.create(make_booking_data(client_id="b", time="13:00"))
        assert store.for_client("a") == [mine]


class TestSlotConflicts:
    def test_strict_store_rejects_double_booking(self, store):
        store.create(make_booking_data())
        with pytest.raises(SlotUnavailableError):
            store.create(make_booking_data(client_id="someone-else"))
        assert len(store) == 1

    def test_cancelled_booking_frees_slot(self, store):
        booking = store.create(make_booking_data())
        store.cancel(booking.id)
        again = store.create(make_booking_data())
        assert again.id != booking.id

    def test_other_service_same_time_is_fine(self, store):
        store.create(make_booking_data(service_id="2"))
        store.create(make_booking_data(service_id="3", total_amount=800))
        assert len(store) == 2

    def test_lenient_store_allows_double_booking(self, catalog):
        store = BookingStore(catalog, strict_slot_check=False)
        store.create(make_booking_data())
        store.create(make_booking_data())
        assert len(store) == 2

    def test_reschedule_onto_taken_slot_rejected(self, store):
        store.create(make_booking_data(time="09:00"))
        moving = store.create(make_booking_data(time="13:00"))
        with pytest.raises(SlotUnavailableError):
            store.reschedule(moving.id, "2024-02-15", "09:00")
        assert store.get(moving.id).time == "13:00"


class TestUpdate:
    def test_empty_patch_leaves_booking_unchanged(self, store):
        booking = store.create(make_booking_data(notes="Outdoor"))
        assert store.update(booking.id, {}) == booking
        assert store.get(booking.id) == booking

    def test_unknown_id_is_noop(self, store):
        store.create(make_booking_data())
        before = store.all()
        assert store.update("BK-MISSING", {"notes": "x"}) is None
        assert store.all() == before

    def test_merges_notes(self, store):
        booking = store.create(make_booking_data())
        updated = store.update(booking.id, {"notes": "Bring a reflector"})
        assert updated.notes == "Bring a reflector"
        assert updated.date == booking.date

    def test_accepts_status_strings(self, store):
        booking = store.create(make_booking_data())
        updated = store.update(booking.id, {"status": "confirmed"})
        assert updated.status == BookingStatus.CONFIRMED

    def test_unknown_field_rejected(self, store):
        booking = store.create(make_booking_data())
        with pytest.raises(ValueError, match="Unknown booking fields"):
            store.update(booking.id, {"discount": 10})

    def test_total_amount_is_fixed(self, store):
        booking = store.create(make_booking_data())
        with pytest.raises(InvalidStatusTransitionError, match="total_amount"):
            store.update(booking.id, {"total_amount": 1})
        assert store.get(booking.id).total_amount == 300

    def test_same_value_for_fixed_field_is_allowed(self, store):
        booking = store.create(make_booking_data())
        assert store.update(booking.id, {"id": booking.id}) == booking

    def test_cancelled_cannot_be_reopened(self, store):
        booking = store.create(make_booking_data())
        store.cancel(booking.id)
        with pytest.raises(InvalidStatusTransitionError):
            store.update(booking.id, {"status": BookingStatus.PENDING})
        assert store.get(booking.id).status == BookingStatus.CANCELLED

    def test_completed_cannot_be_cancelled(self, store):
        booking = store.create(make_booking_data())
        store.update(booking.id, {"status": BookingStatus.CONFIRMED})
        store.complete(booking.id)
        with pytest.raises(InvalidStatusTransitionError):
            store.cancel(booking.id)

    def test_payment_cannot_go_back_to_pending(self, store):
        booking = store.create(make_booking_data())
        store.update(booking.id, {"payment_status": PaymentStatus.PAID})
        with pytest.raises(InvalidStatusTransitionError):
            store.update(booking.id, {"payment_status": PaymentStatus.PENDING})

    def test_cancel_twice_is_idempotent(self, store):
        booking = store.create(make_booking_data())
        store.cancel(booking.id)
        assert store.cancel(booking.id).status == BookingStatus.CANCELLED

    def test_cancel_unknown_id_is_noop(self, store):
        assert store.cancel("BK-MISSING") is None


class TestConfirmPayment:
    @pytest.mark.asyncio
    async def test_confirms_and_marks_paid(self, store, card, gateway):
        booking = store.create(make_booking_data())
        confirmed = await store.confirm_payment(booking.id, card)
        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.payment_status == PaymentStatus.PAID
        assert confirmed.payment_id
        assert confirmed.payment_id.startswith("pay_")
        assert gateway.charges[0]["amount"] == 300
        assert gateway.charges[0]["card"] == "**** **** **** 1111"

    @pytest.mark.asyncio
    async def test_unknown_booking_raises(self, store, card):
        with pytest.raises(BookingNotFoundError):
            await store.confirm_payment("BK-MISSING", card)

    @pytest.mark.asyncio
    async def test_cannot_pay_twice(self, store, card, gateway):
        booking = store.create(make_booking_data())
        await store.confirm_payment(booking.id, card)
        with pytest.raises(InvalidStatusTransitionError):
            await store.confirm_payment(booking.id, card)
        assert len(gateway.charges) == 1

    @pytest.mark.asyncio
    async def test_cancelled_booking_is_not_charged(self, store, card, gateway):
        booking = store.create(make_booking_data())
        store.cancel(booking.id)
        with pytest.raises(InvalidStatusTransitionError):
            await store.confirm_payment(booking.id, card)
        assert gateway.charges == []

    @pytest.mark.asyncio
    async def test_refund_releases_slot(self, store, card):
        booking = store.create(make_booking_data())
        await store.confirm_payment(booking.id, card)
        refunded = store.refund(booking.id)
        assert refunded.payment_status == PaymentStatus.REFUNDED
        assert refunded.status == BookingStatus.CANCELLED
        assert not store.occupied(booking.service_id, booking.date, booking.time)

    @pytest.mark.asyncio
    async def test_default_gateway_is_used_when_none_given(self, catalog, card):
        store = BookingStore(catalog)
        booking = store.create(make_booking_data())
        confirmed = await store.confirm_payment(booking.id, card)
        assert confirmed.payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_gateway_delay_is_awaited(self, catalog, card):
        gateway = MockPaymentGateway(delay_sec=0.01)
        store = BookingStore(catalog, gateway)
        booking = store.create(make_booking_data())
        confirmed = await store.confirm_payment(booking.id, card)
        assert confirmed.payment_id == gateway.charges[0]["payment_id"]

    @pytest.mark.asyncio
    async def test_overlapping_payments_charge_once(self, catalog, card):
        gateway = MockPaymentGateway(delay_sec=0.01)
        store = BookingStore(catalog, gateway)
        booking = store.create(make_booking_data())

        results = await asyncio.gather(
            store.confirm_payment(booking.id, card),
            store.confirm_payment(booking.id, card),
            return_exceptions=True,
        )

        assert len(gateway.charges) == 1
        assert sum(isinstance(r, InvalidStatusTransitionError) for r in results) == 1
        assert store.get(booking.id).payment_id == gateway.charges[0]["payment_id"]

    @pytest.mark.asyncio
    async def test_declined_charge_can_be_retried(self, catalog, card):
        class DeclineOnce(MockPaymentGateway):
            declined = False

            async def charge(self, booking_id, amount, details):
                if not self.declined:
                    self.declined = True
                    raise PaymentError("card declined")
                return await super().charge(booking_id, amount, details)

        store = BookingStore(catalog, DeclineOnce())
        booking = store.create(make_booking_data())
        with pytest.raises(PaymentError):
            await store.confirm_payment(booking.id, card)
        confirmed = await store.confirm_payment(booking.id, card)
        assert confirmed.payment_status == PaymentStatus.PAID
