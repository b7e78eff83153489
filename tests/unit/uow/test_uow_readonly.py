import pytest
from expense_api.models.user import User
from expense_api.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from expense_api.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)
from sqlalchemy import event
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build()  # not persisted
            uow.session.add(user)
            uow.session.flush()
        session.expunge_all()

    def test_allows_reads(self, session):
        """
        Read operations should work normally within RO UoW.
        """
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, session):
        """
        RO UoW must reject commit() by design.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_attaches_to_open_transaction_without_rolling_back(self, session):
        """
        Flushed-but-uncommitted rows survive a read-only block that joined the
        caller's transaction.
        """
        user = UserFactory()
        assert session().in_transaction()

        with ROuow() as uow:
            assert uow.users.get(user.id) is user

        assert session.get(User, user.id) is user

    def test_guard_is_removed_on_exit(self, session):
        with ROuow():
            pass
        user = UserFactory()  # would raise if the flush guard leaked
        assert user.id is not None

    def test_owns_a_fresh_transaction_and_closes_it(self, session):
        assert not session().in_transaction()

        with ROuow() as uow:
            assert uow._owns_transaction
            assert session().in_transaction()

        assert not session().in_transaction()

    def test_guard_is_bound_to_the_current_session_only(self, session):
        with ROuow() as uow:
            current = session()
            assert event.contains(current, "before_flush", uow._before_flush)
            assert not event.contains(type(current), "before_flush", uow._before_flush)

        assert not event.contains(current, "before_flush", uow._before_flush)

    def test_factory_objects_are_clean_before_reads(self, session):
        user = UserFactory(password="s3cret!")
        assert not session.dirty

        with ROuow() as uow:
            assert uow.users.authenticate(user.email, "s3cret!") is not None
