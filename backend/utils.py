from rest_framework.views import exception_handler
from rest_framework.response import Response


def custom_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        custom_response = {
            'error': str(exc),
            'details': response.data,
            'status_code': response.status_code
        }
        # `detail` se mantiene arriba para los errores de permisos/autenticación
        if isinstance(response.data, dict) and 'detail' in response.data:
            custom_response['detail'] = response.data['detail']
        return Response(custom_response, status=response.status_code, headers=_passthrough_headers(response))
    return response


def _passthrough_headers(response):
    return {
        name: response[name]
        for name in ('WWW-Authenticate', 'Retry-After')
        if response.has_header(name)
    }
