from django.core.management.base import BaseCommand, CommandError

from apps.roles_api.models import Role
from apps.roles_api.permission_config import PERMISSION_CAPABILITIES, ROLE_PERMISSIONS
from apps.roles_api.resources import RESOURCE_TABLE


def matrix_errors(matrix=ROLE_PERMISSIONS, catalog=PERMISSION_CAPABILITIES, resources=RESOURCE_TABLE):
    errors = []
    for role in Role:
        if role not in matrix:
            errors.append(f"El rol '{role}' no tiene entrada en la matriz")

    for role, granted in matrix.items():
        for capability in sorted(set(granted) - set(catalog)):
            errors.append(f"El rol '{role}' declara una capacidad desconocida: '{capability}'")

    for resource in resources:
        requirements = [resource.visibility] + [a.requirement for a in resource.actions.values()]
        for requirement in requirements:
            if not requirement.capabilities:
                errors.append(f"El recurso '{resource.name}' tiene un requisito sin capacidades")
            for capability in requirement.capabilities:
                if capability not in catalog:
                    errors.append(f"El recurso '{resource.name}' usa una capacidad desconocida: '{capability}'")
    return errors


class Command(BaseCommand):
    help = "Valida la matriz de permisos y la tabla de recursos"

    def handle(self, *args, **options):
        errors = matrix_errors()
        if errors:
            for error in errors:
                self.stderr.write(self.style.ERROR(f"❌ {error}"))
            raise CommandError(f"Matriz de permisos inválida ({len(errors)} errores)")

        for role, granted in ROLE_PERMISSIONS.items():
            self.stdout.write(f"ℹ️ {role}: {len(granted)} capacidades")
        self.stdout.write(self.style.SUCCESS("🎯 Matriz de permisos válida"))
