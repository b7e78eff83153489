"""Factory Boy base classes bound to the per-test transactional session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session the ``session`` fixture hands to factories."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        """Return the session registered by ``tests/conftest.py``.

        Raises
        ------
        RuntimeError
            When a factory runs in a test that did not request ``session``.
        """
        if cls._session is None:
            raise RuntimeError("No factory session registered; request the 'session' fixture.")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Persist with ``flush`` so ids exist while the test transaction stays open."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"

    @classmethod
    def _after_postgeneration(cls, instance, create, results=None):
        """Flush attributes set by post-generation hooks (e.g. ``password``)."""
        if create and results:
            SQLAlchemySession.get().flush()
