from rest_framework.permissions import BasePermission

from .lifecycle import BookingLifecycle


class CanEditBooking(BasePermission):
    """
    Edición a nivel de objeto: edit_all_bookings, o edit_own_bookings si la
    reserva está asignada al terapeuta del usuario.
    """
    message = 'Sólo puedes modificar tus propias reservas.'
    edit_actions = ('update', 'partial_update')

    def has_permission(self, request, view):
        return True

    def has_object_permission(self, request, view, obj):
        if getattr(view, 'action', None) not in self.edit_actions:
            return True
        return BookingLifecycle(request.user).can_edit(obj)
