from sqlalchemy import case, select, update

from campus_tours import db


ROW_LOCK_DIALECTS = ("postgresql", "mysql", "mariadb")


def supports_row_locks(session=None):
    """True when the bound dialect honours SELECT ... FOR UPDATE."""
    session = session or db.session
    # Prefer session.get_bind(), then session.bind, then the global engine
    try:
        bind = session.get_bind()
    except Exception:
        bind = getattr(session, "bind", None) or getattr(db, "engine", None)

    try:
        dialect_name = bind.dialect.name if bind is not None else None
    except AttributeError:
        dialect_name = None
    return dialect_name in ROW_LOCK_DIALECTS


def get_for_update(model, pk):
    """Load a row by primary key, locking it until the transaction ends.

    On SQLite the write lock taken by the following UPDATE serialises
    writers instead, so a plain fresh SELECT is issued.
    """
    stmt = select(model).where(model.id == pk)
    if supports_row_locks():
        stmt = stmt.with_for_update()
    return db.session.execute(
        stmt.execution_options(populate_existing=True)
    ).scalar_one_or_none()


def lock_for_write(model, pk, touch_column):
    """Serialise writers on a row before reading anything that depends on it.

    Row-lock dialects use SELECT ... FOR UPDATE. Elsewhere a no-op UPDATE of
    ``touch_column`` takes the database write lock up front, so reads made
    afterwards in the same transaction cannot be overtaken by another writer.

    Returns the locked row, or None if it does not exist.
    """
    if not supports_row_locks():
        result = db.session.execute(
            update(model)
            .where(model.id == pk)
            .values({touch_column: touch_column})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
    return get_for_update(model, pk)


def floored_decrement(column, amount=1):
    """SQL expression for ``max(column - amount, 0)`` portable across dialects."""
    return case((column - amount > 0, column - amount), else_=0)
