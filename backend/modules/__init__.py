"""
Feature modules for the Accounts backend.

- auth: credential hashing, password policy, session tokens, login flows
- users: account records, storage adapters, profile management

A module exposes Protocols in interfaces.py and its HTTP surface in
routes.py. Other modules depend on the Protocols only; concrete classes
are wired together in api.dependencies.
"""
