"""Test suite for sc-cluster.

Test organization:
- fixtures/: Synthetic observation generators
- unit/: Unit tests for individual modules
"""
