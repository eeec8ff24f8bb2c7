"""auth/ -- Authentication and authorization package for the Todo API.

Credential hashing (passwords.py), token issuance/verification (tokens.py),
the request auth gate (dependencies.py) and user persistence (store.py).

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or todos/.
api/ imports from auth/, not the other way around.
"""
