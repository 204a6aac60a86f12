'''
Domain types for the valuation library.

MetricOutput is the return type of every engine function: it carries either
a computed value or one of the ErrorKind failures, plus diagnostic
information explaining how the value was computed (or why it was not).
'''

from dataclasses import asdict, dataclass, field
import enum
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar

from buffett_valuation.domain.errors import (
    DivisionByZeroError,
    InvalidInputError,
)

T = TypeVar('T')


class ErrorKind(enum.Enum):
  '''Kinds of domain failure an engine function can report.'''
  INVALID_INPUT = 'invalid_input'
  DIVISION_BY_ZERO = 'division_by_zero'


_ERROR_TYPES = {
    ErrorKind.INVALID_INPUT: InvalidInputError,
    ErrorKind.DIVISION_BY_ZERO: DivisionByZeroError,
}


@dataclass(frozen=True)
class MetricOutput(Generic[T]):
  '''
  Result of an engine computation.

  Exactly one of value and error is set. Failures always carry a
  human-readable 'reason' in diag.

  Attributes:
    value: The computed value, or None on failure
    error: The failure kind, or None on success
    diag: Dictionary of diagnostic information
  '''
  value: Optional[T] = None
  error: Optional[ErrorKind] = None
  diag: Dict[str, Any] = field(default_factory=dict)

  @classmethod
  def success(cls, value: T, **diag: Any) -> 'MetricOutput[T]':
    '''Wrap a computed value.'''
    return cls(value=value, diag=diag)

  @classmethod
  def failure(cls, kind: ErrorKind, reason: str,
              **diag: Any) -> 'MetricOutput[T]':
    '''Report a domain failure of the given kind.'''
    return cls(error=kind, diag={'reason': reason, **diag})

  @property
  def ok(self) -> bool:
    return self.error is None

  @property
  def reason(self) -> Optional[str]:
    '''Failure message, None for successful outputs.'''
    return self.diag.get('reason') if self.error else None

  def unwrap(self) -> T:
    '''
    Return the value, or raise the exception matching the error kind.

    Raises:
      InvalidInputError: error is ErrorKind.INVALID_INPUT
      DivisionByZeroError: error is ErrorKind.DIVISION_BY_ZERO
    '''
    if self.error is not None:
      raise _ERROR_TYPES[self.error](self.diag.get('reason', self.error.value))
    return self.value  # type: ignore[return-value]

  def value_or(self, default: Any) -> Any:
    '''Return the value, or default on failure.'''
    return default if self.error is not None else self.value


@dataclass(frozen=True)
class CompanyFundamentals:
  '''
  Already-parsed financial figures for a single company.

  No currency is tracked: all monetary amounts must be in the same unit.

  Attributes:
    ticker: Company ticker symbol
    net_income: Net income for the period
    depreciation_amortization: Depreciation and amortization charges
    capital_expenditures: Capital expenditures (positive outflow)
    shareholders_equity: Book value of shareholders' equity
    total_debt: Total debt
    total_assets: Total assets
    intangible_assets: Goodwill and other intangible assets
    total_liabilities: Total liabilities
    shares_outstanding: Shares outstanding
    working_capital_change: Increase in working capital (default 0)
    eps_history: Yearly EPS values, oldest first
    market_price: Market price per share, if known
  '''
  ticker: str
  net_income: float
  depreciation_amortization: float
  capital_expenditures: float
  shareholders_equity: float
  total_debt: float
  total_assets: float
  intangible_assets: float
  total_liabilities: float
  shares_outstanding: float
  working_capital_change: float = 0.0
  eps_history: Tuple[float, ...] = ()
  market_price: Optional[float] = None

  REQUIRED_FIELDS = (
      'ticker',
      'net_income',
      'depreciation_amortization',
      'capital_expenditures',
      'shareholders_equity',
      'total_debt',
      'total_assets',
      'intangible_assets',
      'total_liabilities',
      'shares_outstanding',
  )

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> 'CompanyFundamentals':
    '''
    Construct from a JSON-like mapping.

    Raises:
      ValueError: If required fields are missing or not numeric
    '''
    missing = [k for k in cls.REQUIRED_FIELDS if data.get(k) is None]
    if missing:
      ticker = data.get('ticker', '<unknown>')
      raise ValueError(
          f'Missing required data for {ticker}: {", ".join(missing)}')

    ticker = str(data['ticker'])
    try:
      kwargs = {k: float(data[k]) for k in cls.REQUIRED_FIELDS[1:]}
      kwargs['working_capital_change'] = float(
          data.get('working_capital_change') or 0.0)
      kwargs['eps_history'] = tuple(
          float(v) for v in data.get('eps_history') or ())
      price = data.get('market_price')
      kwargs['market_price'] = None if price is None else float(price)
    except (TypeError, ValueError) as e:
      raise ValueError(f'Non-numeric data for {ticker}: {e}') from e
    return cls(ticker=ticker, **kwargs)

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to dictionary (eps_history as a list).'''
    result = asdict(self)
    result['eps_history'] = list(self.eps_history)
    return result


@dataclass
class ValuationResult:
  '''
  Complete valuation of one company under one scenario.

  Metrics that failed are None; their error kind and reason are in diag
  under '<metric>_error' and '<metric>_reason'.

  Attributes:
    ticker: Company ticker symbol
    scenario: Scenario name used for the rates
    owners_earnings: Owner's earnings
    return_on_equity: ROE ratio
    return_on_net_tangible_assets: RONTA ratio
    debt_to_equity: Debt-to-equity ratio
    earnings_per_share: EPS
    eps_cagr: Compound annual growth of eps_history
    intrinsic_value: Total DCF intrinsic value
    iv_per_share: Intrinsic value per share
    pv_explicit: Present value of the explicit projection
    tv_component: Discounted terminal value
    market_price: Market price (if provided)
    price_to_iv: Market price / IV per share (if market price provided)
    margin_of_safety: (IV - Price) / IV (if market price provided)
    diag: Diagnostics and failure reasons
  '''
  ticker: str
  scenario: str
  owners_earnings: Optional[float] = None
  return_on_equity: Optional[float] = None
  return_on_net_tangible_assets: Optional[float] = None
  debt_to_equity: Optional[float] = None
  earnings_per_share: Optional[float] = None
  eps_cagr: Optional[float] = None
  intrinsic_value: Optional[float] = None
  iv_per_share: Optional[float] = None
  pv_explicit: Optional[float] = None
  tv_component: Optional[float] = None
  market_price: Optional[float] = None
  price_to_iv: Optional[float] = None
  margin_of_safety: Optional[float] = None
  diag: Dict[str, Any] = field(default_factory=dict)

  @property
  def failed_metrics(self) -> list:
    '''Names of metrics that could not be computed.'''
    return sorted(k[:-len('_error')] for k in self.diag if k.endswith('_error'))

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to dictionary for DataFrame creation.'''
    result = asdict(self)
    diag = result.pop('diag')
    result.update(diag)
    return result


__all__ = [
    'CompanyFundamentals',
    'ErrorKind',
    'MetricOutput',
    'ValuationResult',
]
