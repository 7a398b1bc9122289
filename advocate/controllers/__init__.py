"""
Request controllers.

Controllers take the principal and request data from the routes, call the
services, and return ``(data, status_code, headers)``. Failures are raised as
:class:`advocate.errors.AdvocateError` and rendered by the application's error
handlers.
"""
