"""Payment, refund and invoice domain error messages."""


class PaymentError:
    """Payment error constants."""

    NOT_FOUND = "Payment not found"
    NOT_OWNER = "Not authorized to pay for this registration"
    ALREADY_PAID = "Payment already completed for this registration"
    ALREADY_VERIFIED = "Payment already verified"
    EVENT_NOT_PAID = "This event does not require payment"
    ONLY_LEADER_CAN_PAY = "Only team leader can make payment for team registration"
    TEAM_PAYMENT_EXISTS = "Payment already initiated or completed for this team"
    REGISTRATION_NOT_PAYABLE = "Registration is not awaiting payment"
    NOT_COMPLETED = "Payment is not completed"
    NOT_PENDING = "Payment is not pending"
    INVALID_AMOUNT = "Payment amount must be greater than 0"
    GATEWAY_FAILED = "Payment gateway request failed"
    SUPERSEDED = "Another payment was initiated for this registration"


class RefundError:
    """Refund error constants."""

    NOT_FOUND = "Refund not found"
    NOT_OWNER = "Not authorized to request refund for this payment"
    PAYMENT_NOT_COMPLETED = "Can only refund completed payments"
    ALREADY_REQUESTED = "Refund already requested for this payment"
    TOO_CLOSE_TO_EVENT = "Event is too close for refund"
    NOT_PENDING = "Refund is not pending"
    NOT_AUTHORIZED = "Not authorized to process this refund"
    INVALID_PERCENTAGE = "Refund percentage must be between 0 and 100"
