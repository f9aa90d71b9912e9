from functools import wraps

from django.http import JsonResponse

from .guards import AuthenticatedGuard, GuardOutcome, Identity, RouteGuard, chain_guards
from .resources import Requirement

LOADING_RETRY_AFTER = 1


def default_identity_resolver(request):
    return Identity.from_user(getattr(request, 'user', None))


def require_capability(*capabilities, role=None, identity_resolver=None):
    """
    Decorador para vistas de función.

    401 si no hay identidad, 403 si el rol no cumple, 503 mientras la identidad
    se está resolviendo. La vista sólo se llama cuando la guarda concede.
    """
    guard = chain_guards(
        AuthenticatedGuard(),
        RouteGuard(Requirement(capabilities=tuple(capabilities), role=role)),
    )
    resolve = identity_resolver or default_identity_resolver

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            identity = resolve(request)
            decision = guard.render(identity, view_func, request, *args, **kwargs)

            if decision.outcome is GuardOutcome.GRANTED:
                return decision.result

            if decision.outcome is GuardOutcome.LOADING:
                response = JsonResponse({'state': 'loading'}, status=503)
                response['Retry-After'] = str(LOADING_RETRY_AFTER)
                return response

            if not identity.is_resolved:
                return JsonResponse({'detail': 'No autenticado'}, status=401)
            return JsonResponse({'detail': 'Sin permisos'}, status=403)
        return wrapper
    return decorator
