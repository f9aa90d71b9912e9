from decimal import Decimal

import factory

from .models import Service


class ServiceFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Service

    name = factory.Sequence(lambda n: f'Massage {n}')
    description = factory.Faker('sentence')
    category = 'relaxation'
    price = Decimal('120.00')
    duration = 60
    is_active = True
