import logging

import pytest
from django.http import JsonResponse

from apps.auth_api.factories import TherapistUserFactory, UserFactory
from apps.roles_api import permission_config as caps
from apps.roles_api.decorators import require_capability
from apps.roles_api.guards import (
    AuthenticatedGuard, GuardOutcome, Identity, IdentityState, RouteGuard, chain_guards,
)
from apps.roles_api.models import Role
from apps.roles_api.resources import requires, requires_role


class SpyView:
    """Vista falsa que cuenta cuántas veces se ejecuta"""

    def __init__(self):
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        return 'rendered'


def resolved(role, user_id=1):
    return Identity(state=IdentityState.RESOLVED, user_id=user_id, role=role)


def test_loading_identity_never_renders_the_view():
    spy = SpyView()
    decision = RouteGuard(requires(caps.VIEW_DASHBOARD)).render(Identity.loading(), spy)
    assert decision.outcome is GuardOutcome.LOADING
    assert decision.result is None
    assert spy.calls == 0


def test_denied_identity_never_renders_the_view(caplog):
    spy = SpyView()
    with caplog.at_level(logging.INFO, logger='apps.roles_api.guards'):
        decision = RouteGuard(requires(caps.MANAGE_USERS)).render(resolved(Role.THERAPIST), spy)
    assert decision.outcome is GuardOutcome.DENIED
    assert not decision.granted
    assert spy.calls == 0
    assert 'Acceso denegado' in caplog.text


def test_granted_identity_renders_the_view_once():
    spy = SpyView()
    decision = RouteGuard(requires(caps.MANAGE_USERS)).render(resolved(Role.SUPER_ADMIN), spy)
    assert decision.granted
    assert decision.result == 'rendered'
    assert spy.calls == 1


@pytest.mark.parametrize('identity', [Identity.anonymous(), resolved(None), resolved('janitor')])
def test_identity_without_valid_role_is_denied(identity):
    assert RouteGuard(requires(caps.VIEW_DASHBOARD)).evaluate(identity) is GuardOutcome.DENIED


def test_role_gate_on_route_guard():
    guard = RouteGuard(requires_role(caps.EDIT_OWN_PROFILE, Role.THERAPIST))
    assert guard.evaluate(resolved(Role.THERAPIST)) is GuardOutcome.GRANTED
    assert guard.evaluate(resolved(Role.ADMIN)) is GuardOutcome.DENIED


def test_chained_guards_first_non_granted_wins():
    guard = chain_guards(AuthenticatedGuard(), RouteGuard(requires(caps.VIEW_REPORTS)))
    assert guard.evaluate(Identity.loading()) is GuardOutcome.LOADING
    assert guard.evaluate(Identity.anonymous()) is GuardOutcome.DENIED
    assert guard.evaluate(resolved(Role.THERAPIST)) is GuardOutcome.DENIED
    assert guard.evaluate(resolved(Role.ADMIN)) is GuardOutcome.GRANTED


def test_chained_guard_renders_only_when_all_grant():
    spy = SpyView()
    guard = chain_guards(AuthenticatedGuard(), RouteGuard(requires(caps.VIEW_REPORTS)))
    assert guard.render(resolved(Role.CUSTOMER), spy).outcome is GuardOutcome.DENIED
    assert guard.render(resolved(Role.ADMIN), spy).result == 'rendered'
    assert spy.calls == 1


@pytest.mark.django_db
def test_identity_from_user():
    user = TherapistUserFactory()
    identity = Identity.from_user(user)
    assert identity.is_resolved
    assert identity.user_id == user.pk
    assert identity.role is Role.THERAPIST
    assert Identity.from_user(None) == Identity.anonymous()


# -- decorador para vistas de función ----------------------------------------

def make_view(spy, *capabilities, **kwargs):
    @require_capability(*capabilities, **kwargs)
    def view(request):
        spy()
        return JsonResponse({'ok': True})
    return view


def test_decorator_returns_503_while_identity_is_loading(rf):
    spy = SpyView()
    view = make_view(spy, caps.VIEW_DASHBOARD, identity_resolver=lambda request: Identity.loading())
    response = view(rf.get('/'))
    assert response.status_code == 503
    assert response['Retry-After'] == '1'
    assert spy.calls == 0


def test_decorator_returns_401_for_anonymous(rf):
    from django.contrib.auth.models import AnonymousUser
    spy = SpyView()
    request = rf.get('/')
    request.user = AnonymousUser()
    response = make_view(spy, caps.VIEW_DASHBOARD)(request)
    assert response.status_code == 401
    assert spy.calls == 0


@pytest.mark.django_db
def test_decorator_returns_403_without_capability(rf):
    spy = SpyView()
    request = rf.get('/')
    request.user = UserFactory(role=Role.CUSTOMER)
    response = make_view(spy, caps.VIEW_REPORTS)(request)
    assert response.status_code == 403
    assert spy.calls == 0


@pytest.mark.django_db
def test_decorator_calls_view_when_granted(rf):
    spy = SpyView()
    request = rf.get('/')
    request.user = UserFactory(role=Role.ADMIN)
    response = make_view(spy, caps.VIEW_REPORTS)(request)
    assert response.status_code == 200
    assert spy.calls == 1


@pytest.mark.django_db
def test_decorator_role_gate(rf):
    spy = SpyView()
    request = rf.get('/')
    request.user = UserFactory(role=Role.ADMIN)
    response = make_view(spy, caps.EDIT_OWN_PROFILE, role=Role.THERAPIST)(request)
    assert response.status_code == 403
    assert spy.calls == 0
