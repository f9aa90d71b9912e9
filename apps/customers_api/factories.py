import factory

from .models import Customer


class CustomerFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Customer

    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    email = factory.Sequence(lambda n: f'customer{n}@example.com')
    phone = factory.Faker('numerify', text='04########')
    address = factory.Faker('address')
