"""Domain Errors"""


class PricingError(Exception):
    """Base error for the pricing library"""


class PriceComputerError(PricingError):
    """Raised when a PriceComputer cannot be constructed"""


class CurrencyMismatchError(PricingError):
    """Raised when amounts in different currencies are combined"""

    def __init__(self, left: str, right: str):
        super().__init__(f"Cannot combine {left} with {right}")
        self.left = left
        self.right = right
