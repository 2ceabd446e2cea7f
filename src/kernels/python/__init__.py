"""
Python math kernels.

These modules are designed to be:
- deterministic (integer-only, explicit floor rounding),
- easy to audit (explicit intermediate variables),
- checked against a 256-bit envelope (see `u256`).
"""
