"""
Authorization gates.

A gate is a callable ``(principal, resource) -> Proceed | Reject``. Gates do
not touch the request themselves; :func:`guarded` runs them in order after
:func:`advocate.auth.authenticated` has attached a principal, and raises the
error carried by the first :class:`Reject`.

.. code-block:: python

   @blueprint.route('/<int:case_id>', methods=['GET'])
   @authenticated
   @guarded(rate_limit(), ownership(), resource=load_case)
   def get_case(case_id: int, resource: dict) -> tuple:
       ...

The resource is whatever the route's loader returns for the URL parameters,
or the JSON body when no loader is given. When a loader is given its result
is also passed to the view as ``resource``.
"""

from functools import wraps
import logging
from typing import Any, Callable, Mapping, NamedTuple, Optional, Union

from flask import current_app, g, request

from .. import domain, errors
from .ratelimit import RateWindowStore, SlidingWindowLimiter

logger = logging.getLogger(__name__)


class Proceed(NamedTuple):
    """The gate lets the request through."""


class Reject(NamedTuple):
    """The gate terminates the request with ``error``."""

    error: errors.AdvocateError


Outcome = Union[Proceed, Reject]
Gate = Callable[[domain.Principal, Any], Outcome]

PROCEED = Proceed()


def ownership(field: str = 'userId') -> Gate:
    """
    Only the owner of the resource may proceed.

    Owner ids are compared as strings, so ``42`` and ``'42'`` are the same
    owner. A resource without ``field`` belongs to nobody.
    """
    def owns(principal: domain.Principal, resource: Any) -> Outcome:
        if resource is None:
            return Reject(errors.resource_not_found())
        owner = resource.get(field) if isinstance(resource, Mapping) \
            else getattr(resource, field, None)
        if owner is None or str(owner) != str(principal.user_id):
            return Reject(errors.access_denied())
        return PROCEED
    return owns


def subscription(required: str = 'free') -> Gate:
    """
    The principal's plan must be at least ``required``.

    Raises
    ------
    ValueError
        If ``required`` does not name a plan.

    """
    try:
        required_plan = domain.Plan[required.upper()]
    except KeyError as e:
        raise ValueError(f'No such plan: {required}') from e

    def subscribed(principal: domain.Principal, resource: Any) -> Outcome:
        if principal.plan < required_plan:
            return Reject(errors.subscription_required(required_plan.label,
                                                       principal.plan.label))
        return PROCEED
    return subscribed


def admin() -> Gate:
    """Only administrators may proceed."""
    def is_admin(principal: domain.Principal, resource: Any) -> Outcome:
        if not principal.is_admin:
            return Reject(errors.admin_required())
        return PROCEED
    return is_admin


def get_rate_store() -> RateWindowStore:
    """Get the rate window store registered on the current application."""
    return current_app.extensions['advocate.rate_store']


def rate_limit(max_requests: Optional[int] = None,
               window: Optional[float] = None,
               store: Optional[RateWindowStore] = None) -> Gate:
    """
    At most ``max_requests`` per principal in any trailing ``window`` seconds.

    Unset parameters are read from ``USER_RATE_LIMIT_MAX`` and
    ``USER_RATE_LIMIT_WINDOW`` at request time; the store defaults to the one
    registered on the application.
    """
    def limited(principal: domain.Principal, resource: Any) -> Outcome:
        config = current_app.config
        limiter = SlidingWindowLimiter(
            store if store is not None else get_rate_store(),
            max_requests=max_requests or config['USER_RATE_LIMIT_MAX'],
            window=window or config['USER_RATE_LIMIT_WINDOW']
        )
        decision = limiter.check(f'user:{principal.user_id}')
        if not decision.allowed:
            logger.info('Rate limit exceeded for user %s', principal.user_id)
            return Reject(errors.RateLimited(decision.retry_after))
        return PROCEED
    return limited


def run(gates: Any, principal: domain.Principal, resource: Any) -> Outcome:
    """Run ``gates`` in order; the first rejection wins."""
    for gate in gates:
        outcome = gate(principal, resource)
        if isinstance(outcome, Reject):
            return outcome
    return PROCEED


def guarded(*gates: Gate, resource: Optional[Callable] = None) -> Callable:
    """
    Generate a decorator that runs ``gates`` before the route.

    Parameters
    ----------
    gates : callable
        Gates to run, in order.
    resource : callable
        Loads the resource the gates inspect. Called with the route's URL
        parameters. If not given, the JSON request body is used.

    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            principal: Optional[domain.Principal] = g.get('principal')
            if principal is None:
                raise errors.token_required()
            if resource is not None:
                loaded = resource(*args, **kwargs)
            else:
                loaded = request.get_json(silent=True)
            outcome = run(gates, principal, loaded)
            if isinstance(outcome, Reject):
                raise outcome.error
            if resource is not None:
                kwargs['resource'] = loaded
            return func(*args, **kwargs)
        return wrapper
    return protector
