class CheckoutError(Exception):
    """Structural problem with a checkout request; nothing is priced."""

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg


class EmptyCartError(CheckoutError):
    def __init__(self):
        super().__init__("Your cart is empty.")


class InvalidCartItemError(CheckoutError):
    pass


class MissingPincodeError(CheckoutError):
    def __init__(self):
        super().__init__("Please select a delivery address.")


class CodUnavailableError(CheckoutError):
    def __init__(self):
        super().__init__("Cash on delivery is not available for this pincode")
