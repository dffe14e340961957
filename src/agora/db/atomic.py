"""Single-record conditional updates.

Each helper runs one matched UPDATE together with the set-member insert or
delete that mirrors it, inside one transaction. The UPDATE's predicate is the
guard: when it matches no row nothing is written and the caller learns about
it through the return value rather than an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import Update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def conditional_update(
    db: Session,
    stmt: Update,
    apply: Callable[[], None] | None = None,
) -> bool:
    """Execute ``stmt`` and, if it matched, ``apply`` in the same transaction.

    Args:
        db: Session bound to the target database.
        stmt: UPDATE whose WHERE clause encodes the match condition.
        apply: Callback performing the companion set mutation once the
            update matched.

    Returns:
        True when a row matched and the transaction committed, False when no
        row matched or a concurrent writer won a unique-key race.

    Raises:
        SQLAlchemyError: Any other storage fault, after rolling back.
    """
    stmt = stmt.execution_options(synchronize_session=False)
    try:
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.rollback()
            return False
        if apply is not None:
            apply()
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.debug("Conditional update lost a unique-key race; treated as no match")
        return False
    except SQLAlchemyError:
        db.rollback()
        raise
    return True
