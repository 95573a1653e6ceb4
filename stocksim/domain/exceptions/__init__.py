"""Domain exceptions."""
from stocksim.domain.exceptions.domain_errors import (
    DomainError,
    InvalidMarketConfigError,
)

__all__ = [
    "DomainError",
    "InvalidMarketConfigError",
]
