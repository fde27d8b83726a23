from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quiztopia import db
from quiztopia.errors import Conflict, Internal


@contextmanager
def store_operation(name: str, conflict_message=None, **context):
    """Run a block of store calls, classifying failures.

    On any SQLAlchemy error the session is rolled back and the failure logged
    with the operation name and ``context``. An ``IntegrityError`` becomes
    ``Conflict`` when ``conflict_message`` is given; everything else becomes
    ``Internal``.
    """
    try:
        yield
    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[store-conflict] op={name} {_fmt(context)} error={type(exc.orig).__name__}")
        if conflict_message is not None:
            raise Conflict(conflict_message) from exc
        raise Internal() from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[store-error] op={name} {_fmt(context)} error={type(exc).__name__}: {_describe(exc)}")
        raise Internal() from exc


def _fmt(context: dict) -> str:
    return ' '.join(f'{k}={v}' for k, v in context.items())


def _describe(exc: SQLAlchemyError) -> str:
    # Driver message only; the wrapped statement parameters may hold credentials
    orig = getattr(exc, 'orig', None)
    return str(orig) if orig is not None else ''
