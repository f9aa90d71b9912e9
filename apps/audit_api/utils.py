from django.contrib.contenttypes.models import ContentType

from .models import AuditLog


def get_client_ip(request):
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def create_audit_log(user, action, description, content_object=None,
                     request=None, source='SYSTEM', extra_data=None):
    """
    Helper único para escribir en AuditLog.

    Si se pasa `request` se toman de ahí la IP y el user agent.
    """
    kwargs = {
        'user': user if user is not None and user.is_authenticated else None,
        'action': action,
        'description': description,
        'source': source,
    }

    if request is not None:
        kwargs['ip_address'] = get_client_ip(request)
        kwargs['user_agent'] = request.META.get('HTTP_USER_AGENT', '')

    if content_object is not None:
        kwargs['content_type'] = ContentType.objects.get_for_model(content_object)
        kwargs['object_id'] = content_object.pk

    if extra_data:
        kwargs['extra_data'] = extra_data

    return AuditLog.objects.create(**kwargs)
