# backend/evenlyo/services/booking_service.py
"""
Booking Service for the Evenlyo platform.

Owns the booking lifecycle: request creation, vendor decisions, payment,
delivery milestones, claims and reviews. Every operation takes the acting
``Actor`` explicitly; role and ownership guards live here rather than in
per-role controllers.

Status changes go through a conditional ``UPDATE ... WHERE status IN (...)``
so a concurrent transition can never be silently overwritten. Accepting a
booking additionally serializes on a per-listing lock so two overlapping
requests cannot both be accepted. Notifications are sent after the status
change has been committed and never undo it.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    DEFAULT_REJECTION_REASON,
    TRACKING_ID_PREFIX,
    TRACKING_ID_RANDOM_LENGTH,
)
from ..core.exceptions import (
    BookingConflictException,
    CancellationWindowExpiredException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.listing_lock import listing_lock
from ..core.timezone_utils import ensure_utc, utc_now
from ..domain.multilingual import MultilingualText
from ..models.booking import Booking, BookingStatus, PaymentStatus
from ..models.listing import Listing
from ..models.review import Review
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Actor, ActorRole
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import (
    BookingCreateRequest,
    ClaimRequest,
    PayBookingRequest,
    PickupRequest,
    ReviewRequest,
)
from .availability_service import AvailabilityResult, AvailabilityService
from .base import BaseService
from .booking_transitions import REVIEWABLE_STATUSES, Transition, get_transition, vendor_actions_for
from .notification_messages import DEFAULT_CANCEL_NOTES, booking_message
from .notification_service import NotificationService
from .pricing_service import PricingRequest, PricingService

logger = logging.getLogger(__name__)

_TRACKING_ALPHABET = string.ascii_uppercase + string.digits
_TRACKING_ID_ATTEMPTS = 5

UNAVAILABLE_MESSAGE = (
    "Selected dates/times are not available. "
    "The time slot may be outside available hours or already booked."
)
ACCEPT_CONFLICT_MESSAGE = "Booking is no longer available due to conflicting bookings"


def generate_tracking_id() -> str:
    """``TRK`` + epoch milliseconds + random uppercase suffix."""
    suffix = "".join(secrets.choice(_TRACKING_ALPHABET) for _ in range(TRACKING_ID_RANDOM_LENGTH))
    return f"{TRACKING_ID_PREFIX}{int(time.time() * 1000)}{suffix}"


def format_booking_dates(booking: Booking) -> str:
    start = booking.start_date.isoformat()
    if booking.is_single_day:
        if booking.has_times:
            return f"{start} ({booking.start_time}-{booking.end_time})"
        return start
    return f"{start} to {booking.end_date.isoformat()}"


class BookingService(BaseService):
    """Role-agnostic booking lifecycle operations."""

    def __init__(
        self,
        db: Session,
        availability_service: Optional[AvailabilityService] = None,
        pricing_service: Optional[PricingService] = None,
        notification_service: Optional[NotificationService] = None,
        cancellation_window_minutes: Optional[int] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.listing_repository = RepositoryFactory.create_listing_repository(db)
        self.review_repository = RepositoryFactory.create_review_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.availability_service = availability_service or AvailabilityService(db)
        self.pricing_service = pricing_service or PricingService(db)
        self.notification_service = notification_service or NotificationService(db)
        self.cancellation_window_minutes = (
            cancellation_window_minutes
            if cancellation_window_minutes is not None
            else settings.cancellation_window_minutes
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking_request")
    def create_booking_request(self, actor: Actor, request: BookingCreateRequest) -> Booking:
        """
        Create a pending booking request for a listing.

        Args:
            actor: The requesting client
            request: Listing, vendor and booking details

        Returns:
            The persisted booking in ``pending`` status

        Raises:
            ForbiddenException: If the actor is not a client
            ValidationException: For invalid dates, vendor mismatch, stock or pricing
            NotFoundException: If the listing is missing or not bookable
            BookingConflictException: If the dates are already taken
        """
        self._require_role(actor, ActorRole.CLIENT, "request")
        details = request.details

        if details.end_date < details.start_date:
            raise ValidationException(
                "End date must be on or after start date.", code="INVALID_DATE_RANGE"
            )
        single_day = details.start_date == details.end_date
        if single_day and not (details.start_time and details.end_time):
            raise ValidationException(
                "Start time and end time are required for single-day bookings.",
                code="TIMES_REQUIRED",
            )

        listing = self.listing_repository.get_bookable(request.listing_id)
        if listing is None:
            raise NotFoundException(
                "Listing not found or not available",
                code="LISTING_NOT_FOUND",
                details={"listing_id": request.listing_id},
            )
        if listing.vendor_id != request.vendor_id:
            raise ValidationException("Vendor mismatch", code="VENDOR_MISMATCH")

        self.availability_service.check_stock(listing, details.quantity)
        self.availability_service.check_lead_time(listing, details.start_date)

        availability = self.availability_service.check_listing(
            listing,
            details.start_date,
            details.end_date,
            start_time=details.start_time,
            end_time=details.end_time,
        )
        self._raise_if_unavailable(availability)

        breakdown = self.pricing_service.calculate_price(
            listing.pricing,
            PricingRequest(
                start_date=details.start_date,
                end_date=details.end_date,
                start_time=details.start_time,
                end_time=details.end_time,
                distance_km=details.distance_km,
                number_of_events=details.number_of_events,
            ),
        )
        pricing = breakdown.to_dict()
        pricing["currency"] = self.pricing_service.pricing_config.currency
        pricing["payment_plan"] = self._payment_plan(listing, breakdown.total_price).to_dict()

        booking_details = details.model_dump(mode="json", exclude_none=True)
        booking_details.update(
            {
                "days": breakdown.diff_days,
                "daily_hours": breakdown.daily_hours,
                "total_hours": breakdown.total_hours,
                "is_multi_day": breakdown.is_multi_day,
                "listing_title": listing.title,
            }
        )

        with self.transaction():
            booking = self.repository.create(
                tracking_id=self._unique_tracking_id(),
                client_id=actor.id,
                vendor_id=listing.vendor_id,
                listing_id=listing.id,
                start_date=details.start_date,
                end_date=details.end_date,
                start_time=details.start_time,
                end_time=details.end_time,
                details=booking_details,
                pricing=pricing,
                status=BookingStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
            )
            booking.append_history(
                BookingStatus.PENDING.value, actor.as_history_actor(), "Booking request created"
            )
            self.repository.flush()

        self.log_operation(
            "create_booking_request",
            booking_id=booking.id,
            tracking_id=booking.tracking_id,
            listing_id=listing.id,
        )
        prometheus_metrics.record_booking_transition("create", "success")

        self.notification_service.notify(
            listing.vendor_id,
            booking_message(
                "booking_requested",
                client=actor.name or "A client",
                title=listing.title_text(),
                dates=format_booking_dates(booking),
                tracking_id=booking.tracking_id,
            ),
            booking_id=booking.id,
            notification_for="vendor",
        )
        return booking

    def _raise_if_unavailable(self, availability: AvailabilityResult, accepting: bool = False) -> None:
        if availability.is_available:
            return
        if availability.reason == AvailabilityService.REASON_BOOKING_CONFLICT:
            raise BookingConflictException(
                ACCEPT_CONFLICT_MESSAGE if accepting else None,
                conflicting_bookings=availability.conflicting_bookings,
            )
        raise ConflictException(
            UNAVAILABLE_MESSAGE,
            code=availability.reason,
            details={"conflicting_bookings": []},
        )

    def _payment_plan(self, listing: Listing, total_price: Any):
        sub_category = listing.sub_category
        return PricingService.payment_plan(
            total_price,
            escrow_enabled=bool(sub_category and sub_category.escrow_enabled),
            upfront_fee_percent=(sub_category.upfront_fee_percent if sub_category else 0.0),
        )

    def _unique_tracking_id(self) -> str:
        for _ in range(_TRACKING_ID_ATTEMPTS):
            candidate = generate_tracking_id()
            if not self.repository.tracking_id_exists(candidate):
                return candidate
        raise ConflictException(
            "Could not allocate a unique tracking id", code="TRACKING_ID_COLLISION"
        )

    # ------------------------------------------------------------------
    # Vendor decisions
    # ------------------------------------------------------------------

    @BaseService.measure_operation("accept_booking")
    def accept_booking(self, actor: Actor, booking_id: str) -> Booking:
        """
        Accept a pending booking.

        The listing lock is held across the availability re-check and the
        conditional status update, and released only after the commit.

        Raises:
            ConflictException: ``LISTING_BUSY`` when the lock cannot be taken,
                ``BOOKING_CONFLICT`` when a committed booking now overlaps,
                ``STATUS_CHANGED`` when another request moved the booking first
        """
        transition = get_transition("accept")
        booking = self._load_for_transition(actor, booking_id, transition)

        with listing_lock(booking.listing_id) as acquired:
            if not acquired:
                prometheus_metrics.record_booking_transition("accept", "busy")
                raise ConflictException(
                    "Listing is busy with another request, please retry.",
                    code="LISTING_BUSY",
                    details={"listing_id": booking.listing_id},
                )
            with self.transaction():
                self.db.refresh(booking)
                self._ensure_from_status(booking, transition)
                listing = self.listing_repository.get_by_id(booking.listing_id)
                availability = self.availability_service.check_listing(
                    listing,
                    booking.start_date,
                    booking.end_date,
                    exclude_booking_id=booking.id,
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                    include_pending=False,
                )
                if not availability.is_available:
                    prometheus_metrics.record_booking_transition("accept", "conflict")
                self._raise_if_unavailable(availability, accepting=True)
                self._apply_transition(
                    booking, transition, actor, "Booking accepted by vendor", accepted_at=utc_now()
                )

        self._after_transition(booking, transition)
        self._notify(
            booking.client_id,
            "booking_accepted",
            booking,
            "client",
            title=self._listing_title(booking),
        )
        return booking

    @BaseService.measure_operation("reject_booking")
    def reject_booking(
        self, actor: Actor, booking_id: str, rejection_reason: Optional[str] = None
    ) -> Booking:
        transition = get_transition("reject")
        reason = (rejection_reason or "").strip() or DEFAULT_REJECTION_REASON
        booking = self._load_for_transition(actor, booking_id, transition)
        with self.transaction():
            self._apply_transition(booking, transition, actor, reason)
            booking.rejection_reason = reason

        self._after_transition(booking, transition)
        self._notify(
            booking.client_id,
            "booking_rejected",
            booking,
            "client",
            title=self._listing_title(booking),
            reason=reason,
        )
        return booking

    # ------------------------------------------------------------------
    # Client payment and cancellation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("pay_booking")
    def pay_booking(self, actor: Actor, booking_id: str, payment: PayBookingRequest) -> Booking:
        """
        Record payment for an accepted booking.

        Escrow bookings may pay only the upfront part; the remainder is
        settled later through ``pay_remaining``.
        """
        transition = get_transition("pay")
        booking = self._load_for_transition(actor, booking_id, transition)

        plan = (booking.pricing or {}).get("payment_plan") or {}
        upfront_only = payment.payment_type == "upfront"
        if upfront_only and not plan.get("escrow_enabled"):
            raise ValidationException(
                "Upfront payment is only available for escrow bookings.",
                code="UPFRONT_NOT_ALLOWED",
            )
        payment_status = PaymentStatus.UPFRONT_PAID if upfront_only else PaymentStatus.PAID

        with self.transaction():
            self._apply_transition(
                booking,
                transition,
                actor,
                "Upfront payment received" if upfront_only else "Payment received",
                payment_status=payment_status.value,
                payment_method=payment.payment_method.value,
                transaction_id=payment.transaction_id,
                is_fully_paid=not upfront_only,
            )

        self._after_transition(booking, transition)
        self._notify(booking.vendor_id, "booking_paid", booking, "vendor")
        return booking

    @BaseService.measure_operation("pay_remaining")
    def pay_remaining(
        self, actor: Actor, booking_id: str, transaction_id: Optional[str] = None
    ) -> Booking:
        """Settle the remaining amount of an escrow booking. Status is unchanged."""
        self._require_role(actor, ActorRole.CLIENT, "pay")
        booking = self._load_owned(actor, booking_id)
        if booking.payment_status != PaymentStatus.UPFRONT_PAID.value or booking.is_fully_paid:
            raise ValidationException(
                "This booking has no outstanding balance.", code="NOTHING_TO_PAY"
            )
        with self.transaction():
            booking.payment_status = PaymentStatus.PAID.value
            booking.is_fully_paid = True
            if transaction_id:
                booking.transaction_id = transaction_id
        self._notify(booking.vendor_id, "booking_paid", booking, "vendor")
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, actor: Actor, booking_id: str, reason: Optional[MultilingualText] = None
    ) -> Booking:
        """
        Cancel a booking within the cancellation window.

        Raises:
            CancellationWindowExpiredException: When more than the configured
                number of minutes have passed since the booking was created
        """
        transition = get_transition("cancel")
        booking = self._load_for_transition(actor, booking_id, transition)

        now = utc_now()
        elapsed_minutes = (now - ensure_utc(booking.created_at)).total_seconds() / 60
        if elapsed_minutes > self.cancellation_window_minutes:
            prometheus_metrics.record_booking_transition("cancel", "window_expired")
            raise CancellationWindowExpiredException(self.cancellation_window_minutes, elapsed_minutes)

        notes = reason or DEFAULT_CANCEL_NOTES
        with self.transaction():
            self._apply_transition(booking, transition, actor, notes.to_dict())
            booking.cancellation_details = {
                "reason": notes.to_dict(),
                "cancelled_by": actor.as_history_actor(),
                "cancelled_at": now.isoformat(),
            }

        self._after_transition(booking, transition)
        self._notify(booking.vendor_id, "booking_cancelled", booking, "vendor")
        return booking

    # ------------------------------------------------------------------
    # Delivery milestones
    # ------------------------------------------------------------------

    @BaseService.measure_operation("mark_on_the_way")
    def mark_on_the_way(self, actor: Actor, booking_id: str) -> Booking:
        transition = get_transition("mark_on_the_way")
        booking = self._load_for_transition(actor, booking_id, transition)
        with self.transaction():
            self._apply_transition(booking, transition, actor, "Vendor is on the way")
            booking.merge_json("delivery_details", {"pickup_time": utc_now().isoformat()})

        self._after_transition(booking, transition)
        self._notify(booking.client_id, "booking_on_the_way", booking, "client")
        return booking

    @BaseService.measure_operation("mark_received")
    def mark_received(self, actor: Actor, booking_id: str) -> Booking:
        transition = get_transition("mark_received")
        booking = self._load_for_transition(actor, booking_id, transition)
        with self.transaction():
            self._apply_transition(booking, transition, actor, "Client confirmed receipt")
            booking.merge_json("delivery_details", {"delivery_time": utc_now().isoformat()})

        self._after_transition(booking, transition)
        self._notify(booking.vendor_id, "booking_received", booking, "vendor")
        return booking

    @BaseService.measure_operation("mark_picked_up")
    def mark_picked_up(
        self, actor: Actor, booking_id: str, pickup: Optional[PickupRequest] = None
    ) -> Booking:
        """
        Record that the vendor collected the items.

        A ``claim`` condition moves the booking straight into ``claim`` with
        vendor-filed claim details instead of ``picked_up``.
        """
        pickup = pickup or PickupRequest()
        base = get_transition("mark_picked_up")
        if pickup.condition == "claim":
            transition = Transition(
                base.action, base.role, base.from_statuses, BookingStatus.CLAIM.value
            )
        else:
            transition = base
        booking = self._load_for_transition(actor, booking_id, transition)

        now = utc_now()
        with self.transaction():
            self._apply_transition(
                booking, transition, actor, pickup.verification_notes or "Items picked up"
            )
            booking.merge_json("delivery_details", {"return_time": now.isoformat()})
            if pickup.verification_notes or pickup.condition:
                booking.merge_json(
                    "feedback",
                    {
                        "vendor_feedback": pickup.verification_notes,
                        "condition": pickup.condition,
                    },
                )
            if pickup.condition == "claim":
                booking.claim_details = {
                    "reason": pickup.claim_reason,
                    "amount": pickup.claim_amount,
                    "claimed_by": ActorRole.VENDOR.value,
                    "claimed_at": now.isoformat(),
                    "status": "pending",
                }

        self._after_transition(booking, transition)
        if pickup.condition == "claim":
            self._notify(
                booking.client_id, "vendor_claim", booking, "client", reason=pickup.claim_reason
            )
            self.notification_service.notify_all_admins(
                booking_message(
                    "vendor_claim", tracking_id=booking.tracking_id, reason=pickup.claim_reason
                ),
                booking_id=booking.id,
            )
        else:
            self._notify(booking.client_id, "booking_picked_up", booking, "client")
        return booking

    @BaseService.measure_operation("mark_finished")
    def mark_finished(self, actor: Actor, booking_id: str) -> Booking:
        transition = get_transition("mark_finished")
        booking = self._load_for_transition(actor, booking_id, transition)
        with self.transaction():
            self._apply_transition(
                booking, transition, actor, "Booking finished by client", completed_at=utc_now()
            )

        self._after_transition(booking, transition)
        message = booking_message("booking_finished", tracking_id=booking.tracking_id)
        self.notification_service.notify(
            booking.vendor_id, message, booking_id=booking.id, notification_for="vendor"
        )
        self.notification_service.notify_all_admins(message, booking_id=booking.id)
        return booking

    @BaseService.measure_operation("mark_completed")
    def mark_completed(self, actor: Actor, booking_id: str) -> Booking:
        transition = get_transition("mark_completed")
        booking = self._load_for_transition(actor, booking_id, transition)
        now = utc_now()
        with self.transaction():
            resolving_claim = booking.status == BookingStatus.CLAIM.value
            self._apply_transition(
                booking,
                transition,
                actor,
                "Claim resolved and booking completed" if resolving_claim else "Booking completed",
                completed_at=now,
            )
            if resolving_claim and booking.claim_details:
                booking.merge_json(
                    "claim_details", {"status": "resolved", "resolved_at": now.isoformat()}
                )

        self._after_transition(booking, transition)
        self._notify(booking.client_id, "booking_completed", booking, "client")
        return booking

    # ------------------------------------------------------------------
    # Claims and reviews
    # ------------------------------------------------------------------

    @BaseService.measure_operation("claim_booking")
    def claim_booking(self, actor: Actor, booking_id: str, claim: ClaimRequest) -> Booking:
        transition = get_transition("claim")
        if not claim.reason.strip() or not claim.claim_type.strip():
            raise ValidationException(
                "Claim reason and claim type are required.", code="CLAIM_DETAILS_REQUIRED"
            )
        booking = self._load_for_transition(actor, booking_id, transition)
        with self.transaction():
            self._apply_transition(booking, transition, actor, claim.reason)
            booking.claim_details = {
                "reason": claim.reason,
                "claim_type": claim.claim_type,
                "claimed_by": ActorRole.CLIENT.value,
                "claimed_at": utc_now().isoformat(),
                "status": "pending",
            }

        self._after_transition(booking, transition)
        message = booking_message(
            "booking_claimed",
            tracking_id=booking.tracking_id,
            claim_type=claim.claim_type,
            reason=claim.reason,
        )
        self.notification_service.notify(
            booking.vendor_id, message, booking_id=booking.id, notification_for="vendor"
        )
        self.notification_service.notify_all_admins(message, booking_id=booking.id)
        return booking

    @BaseService.measure_operation("review_booking")
    def review_booking(self, actor: Actor, booking_id: str, review: ReviewRequest) -> Review:
        """
        Leave a 1-5 star review for a finished booking.

        Updates the rolling rating average of both the vendor and the listing.
        """
        self._require_role(actor, ActorRole.CLIENT, "review")
        if not 1 <= review.rating <= 5:
            raise ValidationException("Rating must be between 1 and 5.", code="INVALID_RATING")

        booking = self._load_owned(actor, booking_id)
        if booking.status not in REVIEWABLE_STATUSES:
            raise NotFoundException(
                "Booking not found or not in "
                f"{' or '.join(sorted(REVIEWABLE_STATUSES))} status",
                code="BOOKING_NOT_FOUND",
                details={"booking_id": booking_id},
            )
        if self.review_repository.get_for_booking(booking.id) is not None:
            raise ConflictException("Booking has already been reviewed.", code="ALREADY_REVIEWED")

        with self.transaction():
            created = self.review_repository.create(
                booking_id=booking.id,
                listing_id=booking.listing_id,
                vendor_id=booking.vendor_id,
                client_id=actor.id,
                rating=review.rating,
                comment=review.comment,
            )
            booking.merge_json(
                "feedback",
                {
                    "rating": review.rating,
                    "comment": review.comment,
                    "reviewed_at": utc_now().isoformat(),
                },
            )
            vendor = self.user_repository.get_by_id(booking.vendor_id)
            if vendor is not None:
                vendor.apply_rating(review.rating)
            listing = self.listing_repository.get_by_id(booking.listing_id)
            if listing is not None:
                listing.apply_rating(review.rating)

        prometheus_metrics.record_booking_transition("review", "success")
        self._notify(booking.vendor_id, "booking_reviewed", booking, "vendor", rating=review.rating)
        return created

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @BaseService.measure_operation("get_booking")
    def get_booking(self, actor: Actor, booking_id: str) -> Booking:
        """Client and vendor see their own bookings; admins see all."""
        booking = self.repository.get_by_id(booking_id)
        if booking is None or not (actor.is_admin or self._owns(actor, booking)):
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id}
            )
        return booking

    @BaseService.measure_operation("list_client_history")
    def list_client_history(
        self, actor: Actor, status: Optional[str] = None, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Booking], int]:
        self._require_role(actor, ActorRole.CLIENT, "view client history of")
        return self.repository.list_for_client(
            actor.id, self._status_filter(status), (page - 1) * per_page, per_page
        )

    @BaseService.measure_operation("list_vendor_history")
    def list_vendor_history(
        self, actor: Actor, status: Optional[str] = None, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Booking], int]:
        self._require_role(actor, ActorRole.VENDOR, "view vendor history of")
        return self.repository.list_for_vendor(
            actor.id, self._status_filter(status), (page - 1) * per_page, per_page
        )

    def list_vendor_pending(
        self, actor: Actor, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Booking], int]:
        return self.list_vendor_history(actor, BookingStatus.PENDING.value, page, per_page)

    def list_vendor_accepted(
        self, actor: Actor, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Booking], int]:
        return self.list_vendor_history(actor, BookingStatus.ACCEPTED.value, page, per_page)

    @staticmethod
    def get_vendor_actions(status: str) -> List[str]:
        return vendor_actions_for(status)

    # ------------------------------------------------------------------
    # Guards and helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _status_filter(status: Optional[str]) -> Optional[str]:
        if not status:
            return None
        try:
            return BookingStatus(status).value
        except ValueError:
            raise ValidationException(
                f"Invalid status: {status}",
                code="INVALID_STATUS",
                details={"allowed": [s.value for s in BookingStatus]},
            )

    @staticmethod
    def _owns(actor: Actor, booking: Booking) -> bool:
        if actor.role == ActorRole.CLIENT:
            return booking.client_id == actor.id
        if actor.role == ActorRole.VENDOR:
            return booking.vendor_id == actor.id
        return False

    @staticmethod
    def _require_role(actor: Actor, role: ActorRole, action: str) -> None:
        if actor.role != role:
            raise ForbiddenException(
                f"Only {role.value}s can {action.replace('_', ' ')} bookings",
                code="ROLE_NOT_ALLOWED",
                details={"required_role": role.value, "actor_role": actor.role.value},
            )

    def _load_owned(self, actor: Actor, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None or not self._owns(actor, booking):
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id}
            )
        return booking

    def _load_for_transition(self, actor: Actor, booking_id: str, transition: Transition) -> Booking:
        self._require_role(actor, transition.role, transition.action)
        booking = self.repository.get_by_id(booking_id)
        if booking is None or not self._owns(actor, booking):
            raise self._not_in_status(booking_id, transition)
        self._ensure_from_status(booking, transition)
        return booking

    def _ensure_from_status(self, booking: Booking, transition: Transition) -> None:
        if booking.status not in transition.from_statuses:
            raise self._not_in_status(booking.id, transition)

    @staticmethod
    def _not_in_status(booking_id: str, transition: Transition) -> NotFoundException:
        return NotFoundException(
            f"Booking not found or not in {transition.describe_allowed()} status",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id, "allowed_statuses": sorted(transition.from_statuses)},
        )

    def _apply_transition(
        self,
        booking: Booking,
        transition: Transition,
        actor: Actor,
        notes: Any = None,
        **values: Any,
    ) -> None:
        """Conditionally move the booking and append the matching history entry."""
        changed = self.repository.transition_status(
            booking.id, transition.from_statuses, transition.to_status, **values
        )
        if not changed:
            prometheus_metrics.record_booking_transition(transition.action, "status_changed")
            raise ConflictException(
                "Booking status was changed by another request. Please refresh and retry.",
                code="STATUS_CHANGED",
                details={"booking_id": booking.id, "expected": sorted(transition.from_statuses)},
            )
        booking.append_history(transition.to_status, actor.as_history_actor(), notes)
        self.repository.flush()

    def _after_transition(self, booking: Booking, transition: Transition) -> None:
        prometheus_metrics.record_booking_transition(transition.action, "success")
        self.log_operation(
            transition.action,
            booking_id=booking.id,
            tracking_id=booking.tracking_id,
            status=booking.status,
        )

    def _listing_title(self, booking: Booking) -> str:
        title = (booking.details or {}).get("listing_title")
        if isinstance(title, dict):
            return title.get("en") or next(iter(title.values()), "")
        if title:
            return str(title)
        listing = self.listing_repository.get_by_id(booking.listing_id)
        return listing.title_text() if listing else ""

    def _notify(
        self, user_id: str, event: str, booking: Booking, audience: str, **context: Any
    ) -> None:
        self.notification_service.notify(
            user_id,
            booking_message(event, tracking_id=booking.tracking_id, **context),
            booking_id=booking.id,
            notification_for=audience,
        )
