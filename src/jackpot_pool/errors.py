from __future__ import annotations

from typing import Final

NOT_OWNER: Final[str] = "Caller is not the owner"
AUTONOMOUS_ONLY: Final[str] = "Autonomous function only"
NO_CONTRACTS: Final[str] = "smart contracts cannot play"
ALREADY_DEPLOYED: Final[str] = "Contract already deployed"
NOT_DEPLOYED: Final[str] = "Contract not deployed"
POOL_NOT_ENDED: Final[str] = "Pool not ended yet"
POOL_ENDED: Final[str] = "Jackpot ended"
END_TOO_SOON: Final[str] = "End period must be in the future"
WINNER_PENDING: Final[str] = "Winner not found yet"
FEE_TOO_HIGH: Final[str] = "Fee must be equal or less than 5%"
PRICE_NOT_POSITIVE: Final[str] = "Entree price must be positive"
PERIOD_NOT_POSITIVE: Final[str] = "Period must be positive"
PERIOD_TOO_LONG: Final[str] = "Period too long"
END_OUT_OF_RANGE: Final[str] = "End period out of range"
VALUE_TOO_LOW: Final[str] = "Value too low"
VALUE_NOT_MULTIPLE: Final[str] = "Value must be a multiple of 1 entree price"
NO_WINNER: Final[str] = "JACKPOT: No winner found"
RESERVE_NOT_COVERED: Final[str] = "Balance does not cover the reserve"


class PoolError(Exception):
    """Base class for every rejected pool invocation."""


class AuthorizationError(PoolError):
    pass


class TimingError(PoolError):
    pass


class InvalidValueError(PoolError):
    pass


class IntegrityError(PoolError):
    """A violated invariant; never recoverable by retrying."""


class ArgsError(PoolError):
    """Argument buffer does not match the endpoint's field layout."""


class InsufficientBalanceError(PoolError):
    def __init__(self, address: str, balance: int, amount: int) -> None:
        self.address = address
        self.balance = balance
        self.amount = amount
        super().__init__(f"Insufficient balance on {address}: {balance} < {amount}")


def ensure(condition: bool, error: type[PoolError], message: str) -> None:
    if not condition:
        raise error(message)
