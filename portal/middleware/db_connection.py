from functools import wraps

from flask import current_app

from portal.services.datastore import datastore
from portal.utils.http import json_error


def requires_datastore(view_function):
    """Answer 503 before running a write view when no datastore is attached."""
    @wraps(view_function)
    def wrapper(*args, **kwargs):
        if not datastore.is_configured():
            current_app.logger.info(f"Rejected write to {view_function.__name__}: datastore not configured")
            return json_error('database_not_configured', 503)
        return view_function(*args, **kwargs)
    return wrapper
