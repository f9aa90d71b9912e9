import factory

from apps.auth_api.factories import TherapistUserFactory

from .models import TherapistProfile


class TherapistProfileFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = TherapistProfile

    user = factory.SubFactory(TherapistUserFactory)
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    email = factory.LazyAttribute(lambda o: o.user.email if o.user else None)
    phone = factory.Faker('numerify', text='04########')
    specialty = 'Remedial'
    years_experience = 3
