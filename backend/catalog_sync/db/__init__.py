"""Database Infrastructure - SQLAlchemy declarative Base shared by models and migrations.

Invariants:
    - Single async engine per process, owned by infrastructure.database.DatabaseSessionManager
    - All sessions are async (AsyncSession)
"""
