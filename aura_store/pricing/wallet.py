from dataclasses import dataclass


@dataclass(frozen=True)
class WalletQuote:
    wallet_used: int
    payable: int

    @property
    def wallet_only(self) -> bool:
        return self.payable == 0


def apply_wallet(total: int, wallet_balance: int, use_wallet: bool) -> WalletQuote:
    if total < 0:
        raise ValueError("total must not be negative")
    wallet_used = min(total, max(wallet_balance, 0)) if use_wallet else 0
    return WalletQuote(wallet_used=wallet_used, payable=total - wallet_used)
