"""Property-based tests using Hypothesis.

These tests use generative testing to explore edge cases of URL
normalization: idempotence, tracking-parameter removal and query ordering.

To run property tests:
    pytest tests/property/ -v --hypothesis-show-statistics
"""
