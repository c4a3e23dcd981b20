"""
Test suite for coinpair-amm

Contains:
- tests/unit/          : Unit tests for individual modules
"""
