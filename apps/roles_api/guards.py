"""
Guardas de ruta.

Una guarda evalúa un Requirement contra la identidad actual y devuelve uno de
tres resultados: LOADING mientras la identidad no se ha resuelto, DENIED o
GRANTED. La vista protegida sólo se ejecuta con GRANTED.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .permission_checker import normalize_role, role_of

logger = logging.getLogger(__name__)


class IdentityState(Enum):
    LOADING = 'loading'
    ANONYMOUS = 'anonymous'
    RESOLVED = 'resolved'


@dataclass(frozen=True)
class Identity:
    state: IdentityState
    user_id: Optional[Any] = None
    role: Optional[str] = None

    @classmethod
    def loading(cls):
        return cls(state=IdentityState.LOADING)

    @classmethod
    def anonymous(cls):
        return cls(state=IdentityState.ANONYMOUS)

    @classmethod
    def from_user(cls, user):
        if user is None or not getattr(user, 'is_authenticated', False):
            return cls.anonymous()
        return cls(state=IdentityState.RESOLVED, user_id=user.pk, role=role_of(user))

    @property
    def is_resolved(self):
        return self.state is IdentityState.RESOLVED


class GuardOutcome(Enum):
    LOADING = 'loading'
    DENIED = 'denied'
    GRANTED = 'granted'


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    result: Any = None

    @property
    def granted(self):
        return self.outcome is GuardOutcome.GRANTED


class AuthenticatedGuard:
    """Guarda exterior: sólo exige una identidad resuelta."""

    def evaluate(self, identity):
        if identity.state is IdentityState.LOADING:
            return GuardOutcome.LOADING
        if not identity.is_resolved:
            return GuardOutcome.DENIED
        return GuardOutcome.GRANTED


class RouteGuard:

    def __init__(self, requirement, matrix=None):
        self.requirement = requirement
        self.matrix = matrix

    def evaluate(self, identity):
        if identity.state is IdentityState.LOADING:
            return GuardOutcome.LOADING
        if not identity.is_resolved or normalize_role(identity.role) is None:
            return GuardOutcome.DENIED
        if self.requirement.is_met(identity.role, self.matrix):
            return GuardOutcome.GRANTED
        return GuardOutcome.DENIED

    def render(self, identity, view, *args, **kwargs):
        """Ejecuta `view` sólo si la guarda concede el acceso."""
        outcome = self.evaluate(identity)
        if outcome is not GuardOutcome.GRANTED:
            if outcome is GuardOutcome.DENIED:
                logger.info(f"Acceso denegado a usuario {identity.user_id} (rol={identity.role}) "
                            f"para {self.requirement.capabilities}")
            return GuardDecision(outcome)
        return GuardDecision(outcome, view(*args, **kwargs))


class ChainedGuard:

    def __init__(self, *guards):
        self.guards = guards

    def evaluate(self, identity):
        for guard in self.guards:
            outcome = guard.evaluate(identity)
            if outcome is not GuardOutcome.GRANTED:
                return outcome
        return GuardOutcome.GRANTED

    def render(self, identity, view, *args, **kwargs):
        outcome = self.evaluate(identity)
        if outcome is not GuardOutcome.GRANTED:
            return GuardDecision(outcome)
        return GuardDecision(outcome, view(*args, **kwargs))


def chain_guards(outer, inner):
    """Compone dos guardas: gana el primer resultado que no sea GRANTED."""
    return ChainedGuard(outer, inner)
