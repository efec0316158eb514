"""Declaration expansion.

A parameterized declaration expands, once and at import time, into one
generated test per parameter set. Nothing here runs tests; the host collects
whatever gets registered.
"""
