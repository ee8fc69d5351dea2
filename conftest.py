import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from recommendations.models import Category, Entity, Recommendation

User = get_user_model()

@pytest.fixture
def user(db):
    return User.objects.create_user(
        email="test@test.com",
        password="test123",
        name="Test User",
    )

@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email="other@test.com",
        password="test123",
    )

@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(
        email="admin@test.com",
        password="test123",
    )

@pytest.fixture
def api_client():
    return APIClient()

@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client

@pytest.fixture
def admin_api_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


def _category(name):
    category, _ = Category.objects.get_or_create(
        name=name,
        defaults={"display_name": name.title()},
    )
    return category

@pytest.fixture
def movie_category(db):
    return _category("MOVIE")

@pytest.fixture
def restaurant_category(db):
    return _category("RESTAURANT")

@pytest.fixture
def fashion_category(db):
    return _category("FASHION")

@pytest.fixture
def movie_entity(movie_category):
    return Entity.objects.create(name="Inception", category=movie_category)

@pytest.fixture
def make_recommendation(user, movie_entity):
    def _make(tags=None, owner=None, entity=None):
        return Recommendation.objects.create(
            user=owner or user,
            entity=entity or movie_entity,
            tags=tags or [],
        )
    return _make
