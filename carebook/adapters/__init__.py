"""Adapters layer for CareBook.

This module contains input/output adapters that interface with the outside
world: the command text parser and the storage adapters. Adapters implement
or consume the Port interfaces defined in the domain layer.
"""
