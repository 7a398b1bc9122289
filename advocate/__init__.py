"""
Backend service for the personal AI legal advocate.

The service is a Flask application exposing a JSON API for user profiles,
case records, chat conversations with the (mock) assistant, and a small
catalogue of legal resources including a case risk assessment.

Requests pass through a fixed pipeline before they reach a controller:

1. :mod:`advocate.auth` verifies the bearer token on the request and resolves
   it to an active :class:`.domain.Principal`.
2. :mod:`advocate.auth.gates` runs the route's authorization gates (ownership,
   subscription plan, admin, per-user rate limit).
3. The controller does its work, optionally calling :mod:`advocate.risk`.

Every failure along the way is an :class:`.errors.AdvocateError`, rendered by
:func:`.factory.jsonify_exception` as ``{"message": ..., "code": ...}``.
"""
