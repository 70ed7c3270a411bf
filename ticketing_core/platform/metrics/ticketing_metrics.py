from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Ticket Reservation Core Metrics Collector

    Tracks reservation outcomes, payment attempts, cancellations and ledger health
    """

    def __init__(self):
        # ========== Reservation Metrics ==========
        self.reservation_requests = Counter(
            'ticket_reservation_requests_total',
            'Total booking creation requests',
            ['event_id', 'result'],  # result: reserved/insufficient_stock/unknown_ticket_type/...
        )

        self.reservation_duration = Histogram(
            'ticket_reservation_duration_seconds',
            'Booking creation processing time',
            ['event_id'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0],
        )

        self.booking_reference_collisions = Counter(
            'booking_reference_collisions_total',
            'Booking reference collisions that forced a retry',
        )

        # ========== Payment Metrics ==========
        self.payment_attempts = Counter(
            'payment_attempts_total',
            'Payment attempts by outcome',
            ['outcome'],  # completed/failed/already_paid/unavailable
        )

        self.payment_gateway_duration = Histogram(
            'payment_gateway_call_duration_seconds',
            'Payment gateway call duration',
            ['operation', 'result'],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
        )

        self.payment_callbacks = Counter(
            'payment_callbacks_total',
            'Gateway callbacks by handling result',
            ['result'],  # applied/duplicate/ignored
        )

        # ========== Cancellation Metrics ==========
        self.cancellations = Counter(
            'booking_cancellations_total',
            'Booking cancellations',
            ['result'],  # cancelled/refunded/already_cancelled
        )

        # ========== Ledger Health ==========
        self.ledger_invariant_violations = Counter(
            'inventory_ledger_invariant_violations_total',
            'Releases that would have pushed available above quantity',
            ['event_id', 'ticket_type'],
        )

        self.compensations = Counter(
            'inventory_compensations_total',
            'Compensating actions run on unit of work rollback',
            ['result'],  # succeeded/failed
        )

    # ========== Helper Methods ==========

    def record_reservation(self, *, event_id: int, result: str, duration: float):
        self.reservation_requests.labels(event_id=event_id, result=result).inc()
        self.reservation_duration.labels(event_id=event_id).observe(duration)

    def record_booking_reference_collision(self):
        self.booking_reference_collisions.inc()

    def record_payment_attempt(self, *, outcome: str):
        self.payment_attempts.labels(outcome=outcome).inc()

    def record_gateway_call(self, *, operation: str, result: str, duration: float):
        self.payment_gateway_duration.labels(operation=operation, result=result).observe(duration)

    def record_payment_callback(self, *, result: str):
        self.payment_callbacks.labels(result=result).inc()

    def record_cancellation(self, *, result: str):
        self.cancellations.labels(result=result).inc()

    def record_ledger_invariant_violation(self, *, event_id: int, ticket_type: str):
        self.ledger_invariant_violations.labels(event_id=event_id, ticket_type=ticket_type).inc()

    def record_compensation(self, *, result: str):
        self.compensations.labels(result=result).inc()


# Global metrics instance
metrics = TicketingMetrics()
