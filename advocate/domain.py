"""Defines the core data structures for the advocate service."""

from datetime import datetime
from enum import Enum
import logging
from typing import Any, Dict, List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class Plan(Enum):
    """
    Subscription plans, in increasing order of privilege.

    The value of each member is its ordinal, so plans compare with ``<`` and
    ``>=`` as "at least" relations.
    """

    FREE = 1
    PREMIUM = 2
    ENTERPRISE = 3

    @property
    def label(self) -> str:
        """The name by which the plan is stored and shown."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Plan':
        """
        Get the plan named ``value``.

        Unknown or missing plan names resolve to :attr:`Plan.FREE`, the
        lowest privilege.
        """
        try:
            return cls[str(value).upper()]
        except KeyError:
            logger.warning('Unknown subscription plan %r; treating as free',
                           value)
            return cls.FREE

    def __lt__(self, other: 'Plan') -> bool:
        if not isinstance(other, Plan):
            return NotImplemented
        return self.value < other.value

    def __ge__(self, other: 'Plan') -> bool:
        if not isinstance(other, Plan):
            return NotImplemented
        return self.value >= other.value


class Role(Enum):
    """User roles."""

    USER = 'user'
    ADMIN = 'admin'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Role':
        """Get the role named ``value``; anything unknown is a plain user."""
        try:
            return cls(value)
        except ValueError:
            logger.warning('Unknown role %r; treating as user', value)
            return cls.USER


class User(NamedTuple):
    """A user record as returned by the user store; never has a password."""

    user_id: str
    profile_name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: Role = Role.USER
    plan: Plan = Plan.FREE
    subscription_status: str = 'active'
    subscription_start: Optional[datetime] = None
    subscription_end: Optional[datetime] = None
    preferences: Dict[str, Any] = {}
    is_active: bool = True
    has_password: bool = False
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def public_profile(self) -> Dict[str, Any]:
        """The representation of the user sent to clients."""
        return {
            'id': self.user_id,
            'profileName': self.profile_name,
            'email': self.email,
            'avatar': self.avatar,
            'role': self.role.value,
            'preferences': self.preferences,
            'subscription': {
                'plan': self.plan.label,
                'status': self.subscription_status,
                'startDate': self.subscription_start,
                'endDate': self.subscription_end,
            },
            'isActive': self.is_active,
            'lastLogin': self.last_login,
            'createdAt': self.created_at,
        }


class Principal(NamedTuple):
    """The authenticated identity attached to a single request."""

    user_id: str
    active: bool
    role: Role
    plan: Plan
    user: Optional[User] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_user(cls, user: User) -> 'Principal':
        return cls(user_id=str(user.user_id), active=user.is_active,
                   role=user.role, plan=user.plan, user=user)


class FactorDetail(NamedTuple):
    """How one risk factor contributed to an assessment."""

    value: str
    score: float
    description: str


class RiskFactorSet(NamedTuple):
    """The input to a risk assessment."""

    factors: Dict[str, str]
    """Factor key to severity label, e.g. ``{'case_complexity': 'high'}``."""

    additional_factors: List[str] = []
    description: Optional[str] = None


class RiskAssessment(NamedTuple):
    """The outcome of scoring a :class:`RiskFactorSet`."""

    risk_score: float
    risk_level: str
    factors: Dict[str, FactorDetail]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'riskScore': self.risk_score,
            'riskLevel': self.risk_level,
            'factors': {key: detail._asdict()
                        for key, detail in self.factors.items()},
            'recommendations': list(self.recommendations),
        }
