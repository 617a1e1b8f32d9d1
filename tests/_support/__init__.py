"""
Test support utilities for sqlspine tests.

Helpers that are not fixtures but are shared across test modules: the
recording executor used to exercise the non-sqlite dialects, and the
entity types the tests persist.
"""
