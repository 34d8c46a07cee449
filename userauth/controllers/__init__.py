"""
Request controllers for the authentication service.

Each controller accepts parsed request data, and returns a tuple of response
data, a status code, and response headers. Failures are raised as
:mod:`werkzeug.exceptions`, which the application renders as JSON.
"""
