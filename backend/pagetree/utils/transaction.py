from contextlib import contextmanager
from pagetree.extensions import db

@contextmanager
def transactional():
    """
    Context manager for database transactions.

    Blocks nest: only the outermost one commits or rolls back, so a
    use case can call another one and still land as a single unit.
    """
    info = db.session.info
    depth = info.get("transaction_depth", 0)
    info["transaction_depth"] = depth + 1
    try:
        yield
        if depth == 0:
            db.session.commit()
    except Exception:
        if depth == 0:
            db.session.rollback()
        raise
    finally:
        info["transaction_depth"] = depth
