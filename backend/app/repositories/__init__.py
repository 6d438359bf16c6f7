"""
Data-access functions consumed by the services.

Each module groups the queries for one aggregate. Functions take the
request-scoped AsyncSession first and never commit; the session dependency
owns the transaction.
"""
