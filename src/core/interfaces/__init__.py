"""Core interfaces.

Structural contracts (Protocol) implemented by the adapters, so callers can
depend on the abstraction and tests can substitute fakes.
"""
