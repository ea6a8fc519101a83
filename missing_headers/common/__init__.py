"""
Common Package

Shared utilities such as error definitions.
"""
