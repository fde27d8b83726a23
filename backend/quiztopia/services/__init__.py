"""Domain services: identity, tokens, ownership and quiz storage.

Routes import from here and stay limited to request parsing and response
assembly; every rule about who may touch what, and what a write does to
related records, lives in this package.
"""
