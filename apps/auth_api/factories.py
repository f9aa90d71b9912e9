import factory
from django.contrib.auth import get_user_model
from faker import Faker

from apps.roles_api.models import Role

fake = Faker('es_ES')

User = get_user_model()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f'user{n}@{fake.domain_name()}')
    full_name = factory.Faker('name')
    role = Role.CUSTOMER

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        raw_password = extracted or 'testpassword'
        self.set_password(raw_password)
        if create:
            self.save()


class SuperAdminFactory(UserFactory):
    role = Role.SUPER_ADMIN


class AdminFactory(UserFactory):
    role = Role.ADMIN


class TherapistUserFactory(UserFactory):
    role = Role.THERAPIST
