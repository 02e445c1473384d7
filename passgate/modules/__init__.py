"""Business modules for Passgate.

Each module is self-contained with its own schemas, services, and
domain logic.
"""
