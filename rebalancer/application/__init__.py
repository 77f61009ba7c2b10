"""
Application Layer

Use cases orchestrating the domain through port interfaces.
"""
