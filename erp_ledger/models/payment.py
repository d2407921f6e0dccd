import enum


class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    BANK_TRANSFER = "BankTransfer"
    CARD = "Card"
    COD = "COD"


class PaymentStatus(str, enum.Enum):
    PAID = "Paid"
    PARTIALLY_PAID = "PartiallyPaid"
    UNPAID = "Unpaid"
