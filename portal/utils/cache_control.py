# portal/utils/cache_control.py

from functools import wraps

from flask import make_response


def cache_hint(seconds):
    """Declare how long downstream caches may keep a view's response.

    ``0`` means the response must always be fresh (``no-store``). Nothing is
    cached in-process; the header is the whole policy.
    """
    def decorator(view_function):
        @wraps(view_function)
        def wrapper(*args, **kwargs):
            response = make_response(view_function(*args, **kwargs))
            if seconds <= 0 or response.status_code >= 400:
                response.headers['Cache-Control'] = 'no-store'
            else:
                response.headers['Cache-Control'] = (
                    f'public, max-age={seconds}, stale-while-revalidate={seconds}'
                )
            return response
        return wrapper
    return decorator
