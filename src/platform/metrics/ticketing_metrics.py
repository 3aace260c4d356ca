from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Ticket Marketplace Core Metrics Collector

    Tracks the purchase funnel (checkout -> confirmation), gate scans,
    transfers and refunds. Every counter carries a `result` label so error
    ratios can be read straight off the series.
    """

    def __init__(self):
        # ========== Purchase Funnel ==========
        self.checkout_requests = Counter(
            'ticketing_checkout_requests_total',
            'Checkout intents created',
            ['event_id', 'result'],  # result: created/sold_out/invalid_promo/error
        )

        self.payment_confirmations = Counter(
            'ticketing_payment_confirmations_total',
            'Payment confirmations processed',
            ['result'],  # confirmed/already_processed/sold_out/order_not_found/failed
        )

        self.tickets_issued = Counter(
            'ticketing_tickets_issued_total', 'Tickets confirmed with a credential', ['event_id']
        )

        self.order_total = Histogram(
            'ticketing_order_total_minor_units',
            'Priced order totals in minor currency units',
            ['currency'],
            buckets=[0, 500, 1000, 2500, 5000, 10000, 25000, 50000, 100000, 250000],
        )

        # ========== Gate and Aftercare ==========
        self.check_ins = Counter(
            'ticketing_check_ins_total',
            'Ticket scans at the gate',
            ['event_id', 'result'],  # valid/already_scanned/rejected
        )

        self.transfers = Counter('ticketing_transfers_total', 'Ticket transfers', ['result'])

        self.refunds = Counter(
            'ticketing_refunds_total',
            'Refund requests',
            ['result'],  # completed/processor_error/rejected
        )

        self.refunded_amount = Counter(
            'ticketing_refunded_amount_minor_units_total',
            'Refunded amount in minor currency units',
            ['currency'],
        )

        # ========== Notifications ==========
        self.emails = Counter(
            'ticketing_emails_total', 'Notification emails', ['kind', 'result']
        )

    # ========== Helper Methods ==========

    def record_checkout(self, *, event_id: int, result: str, total: int = 0, currency: str = ''):
        self.checkout_requests.labels(event_id=event_id, result=result).inc()
        if result == 'created':
            self.order_total.labels(currency=currency).observe(total)

    def record_payment_confirmation(self, *, result: str):
        self.payment_confirmations.labels(result=result).inc()

    def record_tickets_issued(self, *, event_id: int, count: int):
        self.tickets_issued.labels(event_id=event_id).inc(count)

    def record_check_in(self, *, event_id: int, result: str):
        self.check_ins.labels(event_id=event_id, result=result).inc()

    def record_transfer(self, *, result: str):
        self.transfers.labels(result=result).inc()

    def record_refund(self, *, result: str, amount: int = 0, currency: str = ''):
        self.refunds.labels(result=result).inc()
        if result == 'completed':
            self.refunded_amount.labels(currency=currency).inc(amount)

    def record_email(self, *, kind: str, sent: bool):
        self.emails.labels(kind=kind, result='sent' if sent else 'failed').inc()


# Global metrics instance
metrics = TicketingMetrics()
