# Overview: Atomic transaction-number allocation.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import TransactionSequence


def next_sequence_number(name: str) -> int:
    """
    Allocate the next number of a named sequence inside the caller's transaction.

    The UPDATE takes the row lock, so concurrent allocators serialize and
    never see the same number. Does not commit; the number is only consumed
    if the caller's transaction commits.
    """
    if not name:
        raise ValueError("sequence name is required")

    stmt = (
        update(TransactionSequence)
        .where(TransactionSequence.name == name)
        .values(next_number=TransactionSequence.next_number + 1)
    )

    result = db.session.execute(stmt)
    if not result.rowcount:
        # First allocation: create the row inside a savepoint so a lost
        # insert race only unwinds the savepoint.
        try:
            with db.session.begin_nested():
                db.session.add(TransactionSequence(name=name, next_number=2))
            return 1
        except IntegrityError:
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise

    current = (
        db.session.query(TransactionSequence.next_number)
        .filter_by(name=name)
        .scalar()
    )
    return current - 1


def format_transaction_number(prefix: str, number: int, pad: int = 6) -> str:
    return f"{prefix}-{number:0{pad}d}"
