"""Shared fixtures: a small slice of the Tajik hierarchy, users and API clients."""
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.common.locations.models import NodeKind
from apps.common.locations.services import LocationService


def _node(kind, parent, ru, tj=None, eng=None, sort_order=0):
    translations = {'ru': ru}
    if tj:
        translations['tj'] = tj
    if eng:
        translations['eng'] = eng
    return LocationService.create(
        kind=kind,
        parent_id=parent.pk if parent else None,
        title=ru,
        translations=translations,
        sort_order=sort_order,
    )


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def geo(db):
    """
    Согдийская область -> Худжанд -> Центр, Панчшанбе
    Согдийская область -> Бободжон Гафуров -> Джамоат Унджи
    ГБАО -> Рошткала -> Хорог -> Сучан
    ГБАО -> Мургаб
    """
    sughd = _node(NodeKind.PROVINCE, None, 'Согдийская область', 'Вилояти Суғд', 'Sughd Province')
    khujand = _node(NodeKind.CITY, sughd, 'Худжанд', 'Хуҷанд', 'Khujand')
    center = _node(NodeKind.SUBURB, khujand, 'Центр', 'Марказ', 'Center', sort_order=0)
    panjshanbe = _node(NodeKind.SUBURB, khujand, 'Панчшанбе', 'Пањшанбе', 'Panjshanbe', sort_order=1)
    gafurov = _node(NodeKind.DISTRICT, sughd, 'Бободжон Гафуров', 'Бобоҷон Ғафуров', 'Bobojon Ghafurov')
    unji = _node(NodeKind.COMMUNITY, gafurov, 'Джамоат Унджи', 'Ҷамоати Унҷӣ', 'Unji Jamoat')

    gbao = _node(NodeKind.PROVINCE, None, 'ГБАО', 'ВМКБ', 'GBAO', sort_order=1)
    roshtqala = _node(NodeKind.DISTRICT, gbao, 'Рошткала', 'Роштқалъа', 'Roshtqala')
    khorog = _node(NodeKind.SETTLEMENT, roshtqala, 'Хорог', 'Хоруғ', 'Khorog')
    suchan = _node(NodeKind.VILLAGE, khorog, 'Сучан', 'Сучон', 'Suchan')
    murghob = _node(NodeKind.CITY, gbao, 'Мургаб', 'Мурғоб', 'Murghob')

    return SimpleNamespace(
        sughd=sughd, khujand=khujand, center=center, panjshanbe=panjshanbe,
        gafurov=gafurov, unji=unji,
        gbao=gbao, roshtqala=roshtqala, khorog=khorog, suchan=suchan, murghob=murghob,
    )


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username='dilshod', password='secret-pass-123')


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username='nigina', password='secret-pass-123')


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_superuser(username='admin', password='secret-pass-123')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client
