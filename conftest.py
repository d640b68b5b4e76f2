import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from accounts.models import UserProfile


def make_user(username, role=UserProfile.USER, password="secret1", **extra):
    user = User.objects.create_user(username=username, password=password, **extra)
    user.profile.role = role
    user.profile.name = username.title()
    user.profile.save()
    return user


@pytest.fixture
def station_admin(db):
    return make_user("boss", UserProfile.ADMIN)


@pytest.fixture
def manager(db):
    return make_user("manager", UserProfile.MANAGER)


@pytest.fixture
def operator(db):
    return make_user("operator", UserProfile.USER)


@pytest.fixture
def api():
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user)
    return client


@pytest.fixture
def admin_api(station_admin):
    return _client_for(station_admin)


@pytest.fixture
def manager_api(manager):
    return _client_for(manager)


@pytest.fixture
def operator_api(operator):
    return _client_for(operator)
