from hostel_occupancy.services.payment.payment_service import PaymentService

__all__ = ["PaymentService"]
