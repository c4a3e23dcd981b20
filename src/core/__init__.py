"""
Core domain models, mathematical primitives, and invariants.

This module contains the foundational building blocks of the liquidity pool
that are independent of any embedding application (CLI, API, persistence).
"""
