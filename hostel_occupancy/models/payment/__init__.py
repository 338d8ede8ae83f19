from hostel_occupancy.models.payment.payment import Payment, recompute_payment

__all__ = ["Payment", "recompute_payment"]
