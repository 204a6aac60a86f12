'''Valuation engine with pure math functions.'''

from buffett_valuation.engine.dcf import (
    compute_pv_explicit,
    compute_terminal_value,
    intrinsic_value,
    intrinsic_value_per_share,
    margin_of_safety,
    project_cash_flows,
)
from buffett_valuation.engine.metrics import (
    debt_to_equity,
    earnings_per_share,
    eps_cagr,
    owners_earnings,
    return_on_equity,
    return_on_net_tangible_assets,
)

__all__ = [
    'compute_pv_explicit',
    'compute_terminal_value',
    'debt_to_equity',
    'earnings_per_share',
    'eps_cagr',
    'intrinsic_value',
    'intrinsic_value_per_share',
    'margin_of_safety',
    'owners_earnings',
    'project_cash_flows',
    'return_on_equity',
    'return_on_net_tangible_assets',
]
