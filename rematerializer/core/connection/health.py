"""
Connection health check for the backing database.
"""

from typing import Any

from rematerializer.models import ProductTypeEnum

from .drivers import close_quiet, execute


def health_check(conn: Any, product_type: ProductTypeEnum) -> bool:
    """
    Run SELECT 1 and return True if no exception. All supported products accept SELECT 1.
    """
    cur = None
    try:
        cur = conn.cursor()
        execute(cur, "SELECT 1", product_type=product_type)
        cur.fetchone()
        return True
    except Exception:
        return False
    finally:
        if cur is not None:
            close_quiet(cur)
