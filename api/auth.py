# File: ethanol_gauging/api/auth.py
from functools import wraps
from flask import request, abort, current_app


def require_api_key(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("API_KEY")
        if expected and request.headers.get('x-api-key') == expected:
            return f(*args, **kwargs)
        else:
            abort(401)
    return decorated_function
