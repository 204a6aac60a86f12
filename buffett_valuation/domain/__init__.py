"""Domain types for the valuation library."""

from buffett_valuation.domain.errors import DivisionByZeroError
from buffett_valuation.domain.errors import InvalidInputError
from buffett_valuation.domain.errors import ValuationError
from buffett_valuation.domain.types import CompanyFundamentals
from buffett_valuation.domain.types import ErrorKind
from buffett_valuation.domain.types import MetricOutput
from buffett_valuation.domain.types import ValuationResult

__all__ = [
    'CompanyFundamentals',
    'DivisionByZeroError',
    'ErrorKind',
    'InvalidInputError',
    'MetricOutput',
    'ValuationError',
    'ValuationResult',
]
