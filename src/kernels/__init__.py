"""
Kernel layer.

Integer-only math the pool operations are built on. Kernels know nothing
about pools, fees or time; they take reserves and amounts and return amounts.
"""
