"""
Core AMM operations.

- `errors`: exception taxonomy
- `fees`: fee configuration and extraction
- `amm_dispatch`: pool-kind dispatch onto the math kernels
- `swap`, `liquidity`: pure pool transitions
- `aggregation`, `bank`: time-windowed counters and fee banks
- `dex`: exchange state that owns pools, banks and share balances
- `pool_config`: YAML pool presets

Submodules are imported explicitly by callers; this package does not
re-export them because the kernel layer imports `errors` from here.
"""
