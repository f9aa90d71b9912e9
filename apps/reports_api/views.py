from datetime import datetime, timedelta

from django.db.models import Count, Q, Sum
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.bookings_api.lifecycle import BookingLifecycle
from apps.bookings_api.models import Booking, BookingStatus, PaymentStatus
from apps.customers_api.models import Customer
from apps.roles_api import permission_config as caps
from apps.roles_api.decorators import require_capability
from apps.roles_api.permissions import capability_permission_for
from apps.services_api.models import Service
from apps.therapists_api.models import TherapistProfile


def _visible_bookings(request):
    lifecycle = BookingLifecycle(request.user)
    if lifecycle.can(caps.VIEW_ALL_BOOKINGS):
        return Booking.objects.all(), lifecycle
    if lifecycle.can(caps.VIEW_OWN_BOOKINGS):
        return Booking.objects.filter(therapist__user=request.user), lifecycle
    return Booking.objects.none(), lifecycle


def _parse_date(value):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date() if value else None
    except ValueError:
        return None


@extend_schema(description="Estadísticas del panel principal, limitadas a lo que el rol puede ver.")
@api_view(['GET'])
@permission_classes([AllowAny])
@require_capability(caps.VIEW_DASHBOARD)
def dashboard_stats(request):
    """Estadísticas para dashboard"""
    bookings, lifecycle = _visible_bookings(request)
    now = timezone.now()
    today = timezone.localdate()

    stats = bookings.aggregate(
        total=Count('id'),
        today=Count('id', filter=Q(booking_time__date=today)),
        upcoming=Count('id', filter=Q(booking_time__gte=now) & ~Q(status__in=[
            BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.DECLINED,
        ])),
        pending_payment=Count('id', filter=Q(payment_status=PaymentStatus.PENDING)),
    )
    by_status = {row['status']: row['count'] for row in bookings.values('status').annotate(count=Count('id'))}

    data = {
        'bookings': {
            **stats,
            'by_status': {value: by_status.get(value, 0) for value in BookingStatus.values},
        },
    }
    if lifecycle.can(caps.VIEW_CUSTOMERS):
        data['customers'] = Customer.objects.filter(is_active=True).count()
    if lifecycle.can(caps.VIEW_THERAPISTS):
        data['therapists'] = TherapistProfile.objects.filter(is_active=True).count()
    if lifecycle.can(caps.VIEW_SERVICES):
        data['services'] = Service.objects.filter(is_active=True).count()
    return Response(data)


@extend_schema(description="Reporte de reservas: estados, pagos, ingresos y pagos a terapeutas.")
@api_view(['GET'])
@permission_classes([capability_permission_for(caps.VIEW_REPORTS)])
def booking_report(request):
    """Reporte de reservas por rango de fechas (por defecto, últimos 30 días)"""
    date_to = _parse_date(request.query_params.get('date_to')) or timezone.localdate()
    date_from = _parse_date(request.query_params.get('date_from')) or date_to - timedelta(days=30)

    bookings = Booking.objects.filter(booking_time__date__gte=date_from, booking_time__date__lte=date_to)
    paid = Q(payment_status=PaymentStatus.PAID)

    totals = bookings.aggregate(
        total_bookings=Count('id'),
        revenue=Sum('price', filter=paid),
        therapist_fees=Sum('therapist_fee', filter=paid),
        refunded=Sum('price', filter=Q(payment_status=PaymentStatus.REFUNDED)),
    )

    by_status = {row['status']: row['count'] for row in bookings.values('status').annotate(count=Count('id'))}
    by_payment = {
        row['payment_status']: row['count']
        for row in bookings.values('payment_status').annotate(count=Count('id'))
    }

    by_therapist = (
        bookings.filter(therapist__isnull=False)
        .values('therapist', 'therapist__first_name', 'therapist__last_name')
        .annotate(bookings=Count('id'), fees=Sum('therapist_fee', filter=paid))
        .order_by('-bookings')
    )
    by_service = (
        bookings.filter(service__isnull=False)
        .values('service', 'service__name')
        .annotate(bookings=Count('id'), revenue=Sum('price', filter=paid))
        .order_by('-bookings')
    )

    return Response({
        'date_from': date_from,
        'date_to': date_to,
        'total_bookings': totals['total_bookings'],
        'revenue': float(totals['revenue'] or 0),
        'therapist_fees': float(totals['therapist_fees'] or 0),
        'net_revenue': float((totals['revenue'] or 0) - (totals['therapist_fees'] or 0)),
        'refunded': float(totals['refunded'] or 0),
        'by_status': {value: by_status.get(value, 0) for value in BookingStatus.values},
        'by_payment_status': {value: by_payment.get(value, 0) for value in PaymentStatus.values},
        'by_therapist': [{
            'therapist': row['therapist'],
            'therapist_name': f"{row['therapist__first_name']} {row['therapist__last_name']}".strip(),
            'bookings': row['bookings'],
            'fees': float(row['fees'] or 0),
        } for row in by_therapist],
        'by_service': [{
            'service': row['service'],
            'service_name': row['service__name'],
            'bookings': row['bookings'],
            'revenue': float(row['revenue'] or 0),
        } for row in by_service],
    })
