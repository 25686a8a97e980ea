"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import UserFactory

    # User with a random first/last name on the auto-created profile
    user = UserFactory()

    # User whose profile has no name
    user = UserFactory(first_name="", last_name="")
"""

import factory

from authentication.models import Profile, User


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active users through UserManager.create_user(), which also
    fills the signal-created Profile with first_name/last_name.

    Examples:
        user = UserFactory(first_name="Ada")
        staff = UserFactory(is_staff=True)
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    is_active = True
    is_staff = False
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")

    @classmethod
    def _build(cls, model_class, *args, **kwargs):
        """Names go to an unsaved Profile; User.first_name is read-only."""
        names = {
            field: kwargs.pop(field) for field in ("first_name", "last_name") if field in kwargs
        }
        kwargs.pop("password", None)
        user = model_class(*args, **kwargs)
        user.profile = Profile(**names)
        return user

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class ProfileFactory(factory.django.DjangoModelFactory):
    """
    Factory for Profile model.

    Profiles normally come from the post_save signal; get_or_create on
    user makes this factory update that profile instead of colliding.
    """

    class Meta:
        model = Profile
        django_get_or_create = ("user",)

    user = factory.SubFactory(UserFactory)
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
