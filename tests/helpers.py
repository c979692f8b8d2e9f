"""Small database helpers shared by the test modules."""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from dairy_ops.models import Member


def set_wallet_balance(session_factory, member_id, amount):
    session = session_factory()
    try:
        member = session.get(Member, member_id)
        member.wallet_balance = Decimal(amount)
        session.commit()
    finally:
        session.close()


def get_row(session_factory, model, id_):
    session = session_factory()
    try:
        return session.get(model, id_)
    finally:
        session.close()


def count_rows(session_factory, model):
    session = session_factory()
    try:
        return session.execute(select(func.count()).select_from(model)).scalar_one()
    finally:
        session.close()


def failing_commit_factory(session_factory):
    """Session factory whose sessions stage writes but refuse to commit."""

    def factory():
        session = session_factory()

        def commit():
            raise OperationalError("COMMIT", None, Exception("disk I/O error"))

        session.commit = commit
        return session

    return factory
