"""API tests for geography reads, address validation and user addresses."""
import pytest

from apps.common.locations.models import Address, NodeKind
from apps.common.locations.services import AddressService, LocationService

pytestmark = pytest.mark.django_db

BASE = '/api/geography'


class TestNodeReads:
    """Per-kind lists and details."""

    def test_provinces_default_locale(self, api_client, geo):
        response = api_client.get(f'{BASE}/provinces/')

        assert response.status_code == 200
        assert response.data['locale'] == 'tj'
        assert response.data['count'] == 2
        assert [p['title'] for p in response.data['results']] == ['Вилояти Суғд', 'ВМКБ']

    def test_provinces_english(self, api_client, geo):
        response = api_client.get(f'{BASE}/provinces/', {'locale': 'eng'})
        assert [p['title'] for p in response.data['results']] == ['Sughd Province', 'GBAO']

    def test_unknown_locale(self, api_client, geo):
        response = api_client.get(f'{BASE}/provinces/', {'locale': 'fr'})

        assert response.status_code == 404
        assert response.data['code'] == 'LOCALE_NOT_FOUND'

    def test_cities_embed_suburbs(self, api_client, geo):
        response = api_client.get(f'{BASE}/cities/', {'parent': geo.sughd.pk, 'locale': 'ru'})

        assert response.status_code == 200
        city = response.data['results'][0]
        assert city['title'] == 'Худжанд'
        assert city['parent'] == geo.sughd.pk
        assert [s['title'] for s in city['suburbs']] == ['Центр', 'Панчшанбе']

    def test_district_embeds_settlements_and_communities(self, api_client, geo):
        response = api_client.get(f'{BASE}/districts/{geo.roshtqala.pk}/', {'locale': 'ru'})

        assert response.status_code == 200
        assert response.data['title'] == 'Рошткала'
        assert response.data['communities'] == []
        settlement = response.data['settlements'][0]
        assert settlement['title'] == 'Хорог'
        assert [v['title'] for v in settlement['villages']] == ['Сучан']

    def test_province_embeds_cities_and_districts(self, api_client, geo):
        response = api_client.get(f'{BASE}/provinces/{geo.gbao.pk}/', {'locale': 'ru'})

        assert response.status_code == 200
        assert response.data['title'] == 'ГБАО'
        assert [c['title'] for c in response.data['cities']] == ['Мургаб']
        assert [d['title'] for d in response.data['districts']] == ['Рошткала']
        assert 'settlements' not in response.data['districts'][0]

    def test_detail_of_wrong_kind(self, api_client, geo):
        response = api_client.get(f'{BASE}/cities/{geo.sughd.pk}/')

        assert response.status_code == 404
        assert response.data['code'] == 'LOCATION_NOT_FOUND'

    def test_bad_parent_param(self, api_client, geo):
        response = api_client.get(f'{BASE}/cities/', {'parent': 'abc'})
        assert response.status_code == 400

    def test_list_reflects_new_child(self, api_client, geo):
        api_client.get(f'{BASE}/suburbs/', {'parent': geo.khujand.pk})
        LocationService.create(NodeKind.SUBURB, geo.khujand.pk, 'Шелкокомбинат', translations={'tj': 'Шелкокомбинат'})

        response = api_client.get(f'{BASE}/suburbs/', {'parent': geo.khujand.pk})
        assert response.data['count'] == 3

    def test_children_and_ancestors(self, api_client, geo):
        children = api_client.get(f'{BASE}/nodes/{geo.roshtqala.pk}/children/', {'kind': 'settlement', 'locale': 'eng'})
        assert [c['title'] for c in children.data['results']] == ['Khorog']

        ancestors = api_client.get(f'{BASE}/nodes/{geo.suchan.pk}/ancestors/', {'locale': 'ru'})
        assert [a['title'] for a in ancestors.data] == ['ГБАО', 'Рошткала', 'Хорог', 'Сучан']

    def test_statistics(self, api_client, geo):
        response = api_client.get(f'{BASE}/statistics/')
        assert response.data == {
            'province': 2, 'city': 2, 'district': 2, 'suburb': 2,
            'settlement': 1, 'community': 1, 'village': 1,
        }


class TestSearch:
    """Title search in any locale."""

    def test_search(self, api_client, geo):
        response = api_client.get(f'{BASE}/search/', {'q': 'Худж', 'locale': 'eng'})

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['title'] == 'Khujand'

    def test_search_translations_with_kind(self, api_client, geo):
        response = api_client.get(f'{BASE}/search/', {'q': 'Center', 'kind': 'suburb', 'locale': 'ru'})
        assert [r['title'] for r in response.data['results']] == ['Центр']

    def test_query_too_short(self, api_client, geo):
        response = api_client.get(f'{BASE}/search/', {'q': 'Х'})

        assert response.status_code == 400
        assert response.data['code'] == 'VALIDATION_ERROR'

    @pytest.mark.parametrize('limit', ['-1', '0'])
    def test_limit_below_one(self, api_client, geo, limit):
        response = api_client.get(f'{BASE}/search/', {'q': 'Ху', 'limit': limit})

        assert response.status_code == 400
        assert list(response.data['details']['field_errors']) == ['limit']

    def test_limit_caps_results(self, api_client, geo):
        response = api_client.get(f'{BASE}/search/', {'q': 'kh', 'limit': '1'})
        assert response.data['count'] == 1


class TestNodeAdmin:
    """Hierarchy writes are admin only."""

    def test_create_requires_staff(self, auth_client, geo):
        response = auth_client.post(f'{BASE}/nodes/', {'kind': 'suburb', 'parent': geo.khujand.pk}, format='json')
        assert response.status_code == 403

    def test_create(self, staff_client, geo):
        response = staff_client.post(f'{BASE}/nodes/', {
            'kind': 'suburb', 'parent': geo.khujand.pk, 'title': 'Гулистон',
            'translations': {'tj': 'Гулистон', 'eng': 'Guliston'},
        }, format='json')

        assert response.status_code == 201
        assert response.data['title'] == 'Гулистон'
        assert response.data['parent'] == geo.khujand.pk

    def test_create_with_wrong_parent(self, staff_client, geo):
        response = staff_client.post(f'{BASE}/nodes/', {'kind': 'village', 'parent': geo.roshtqala.pk}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_PARENT'

    def test_delete_detaches_addresses(self, staff_client, geo, user):
        address = AddressService.create({'province': geo.sughd.pk, 'city': geo.khujand.pk}, owner=user)

        response = staff_client.delete(f'{BASE}/nodes/{geo.khujand.pk}/')

        assert response.status_code == 200
        assert response.data == {'deleted': geo.khujand.pk, 'detached_addresses': 1}
        assert Address.objects.get(pk=address.pk).city_id is None

    def test_delete_requires_staff(self, auth_client, geo):
        response = auth_client.delete(f'{BASE}/nodes/{geo.khujand.pk}/')
        assert response.status_code == 403

    def test_delete_missing(self, staff_client, db):
        response = staff_client.delete(f'{BASE}/nodes/999999/')
        assert response.status_code == 404


class TestValidateAndPreview:
    """Stateless address checks."""

    def test_validate_conflict(self, api_client, geo):
        response = api_client.post(f'{BASE}/addresses/validate/', {
            'province': geo.sughd.pk, 'city': geo.khujand.pk, 'district': geo.gafurov.pk,
        }, format='json')

        assert response.status_code == 200
        assert response.data['valid'] is False
        assert response.data['address'] is None
        assert response.data['violations'] == [{
            'kind': 'BRANCH_CONFLICT', 'field': 'branch',
            'message': 'city and district branches are mutually exclusive',
        }]

    def test_validate_ok(self, api_client, geo):
        response = api_client.post(f'{BASE}/addresses/validate/', {
            'provinceId': geo.gbao.pk, 'districtId': geo.roshtqala.pk, 'settlement_id': geo.khorog.pk,
        }, format='json')

        assert response.data['valid'] is True
        assert response.data['address']['settlement'] == geo.khorog.pk

    def test_preview(self, api_client, geo):
        response = api_client.post(f'{BASE}/addresses/preview/?locale=ru', {
            'province': geo.sughd.pk, 'city': geo.khujand.pk, 'suburbs': [geo.center.pk],
        }, format='json')

        assert response.status_code == 200
        assert response.data['full'] == 'Согдийская область, Худжанд, Центр'
        assert response.data['short'] == 'Худжанд, Центр'
        assert response.data['valid'] is True

    def test_preview_of_incomplete_selection(self, api_client, geo):
        response = api_client.post(f'{BASE}/addresses/preview/?locale=ru', {'city': geo.khujand.pk}, format='json')

        assert response.data['valid'] is False
        assert response.data['full'] == 'Худжанд'


class TestUserAddresses:
    """CRUD over the current user's addresses."""

    @pytest.fixture
    def address(self, geo, user):
        return AddressService.create({
            'province': geo.gbao.pk, 'district': geo.roshtqala.pk,
            'settlement': geo.khorog.pk, 'village': geo.suchan.pk,
        }, owner=user)

    def test_requires_auth(self, api_client, db):
        response = api_client.get(f'{BASE}/addresses/')
        assert response.status_code == 401

    def test_create(self, auth_client, geo):
        response = auth_client.post(f'{BASE}/addresses/?locale=ru', {
            'province': geo.sughd.pk, 'city': {'id': geo.khujand.pk, 'title': 'Худжанд'},
            'suburbs': [geo.center.pk], 'line': 'ул. Ленина 12',
        }, format='json')

        assert response.status_code == 201
        assert response.data['province'] == {'id': geo.sughd.pk, 'title': 'Согдийская область'}
        assert response.data['suburbs'] == [{'id': geo.center.pk, 'title': 'Центр'}]
        assert response.data['district'] is None
        assert response.data['full'] == 'Согдийская область, Худжанд, Центр, ул. Ленина 12'
        assert response.data['short'] == 'Худжанд, Центр'

    def test_create_invalid(self, auth_client, geo):
        response = auth_client.post(f'{BASE}/addresses/', {
            'city': geo.khujand.pk, 'district': geo.gafurov.pk,
        }, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_ADDRESS'
        field_errors = response.data['details']['field_errors']
        assert set(field_errors) == {'province', 'branch'}
        kinds = [v['kind'] for v in response.data['details']['violations']]
        assert kinds == ['MISSING_REQUIRED_FIELD', 'BRANCH_CONFLICT']
        assert Address.objects.count() == 0

    def test_list(self, auth_client, address):
        response = auth_client.get(f'{BASE}/addresses/', {'locale': 'eng'})

        assert response.status_code == 200
        assert len(response.data) == 1
        assert response.data[0]['full'] == 'GBAO, Roshtqala, Khorog, Suchan'

    def test_other_user_cannot_see(self, address, other_user, api_client):
        api_client.force_authenticate(user=other_user)
        assert api_client.get(f'{BASE}/addresses/').data == []

        response = api_client.get(f'{BASE}/addresses/{address.pk}/')
        assert response.status_code == 404
        assert response.data['code'] == 'ADDRESS_NOT_FOUND'

    def test_patch(self, auth_client, address, geo):
        response = auth_client.patch(f'{BASE}/addresses/{address.pk}/?locale=ru', {'village': None}, format='json')

        assert response.status_code == 200
        assert response.data['village'] is None
        assert response.data['full'] == 'ГБАО, Рошткала, Хорог'

    def test_patch_conflict(self, auth_client, address, geo):
        response = auth_client.patch(f'{BASE}/addresses/{address.pk}/', {'city': geo.murghob.pk}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_ADDRESS'
        assert 'branch' in response.data['details']['field_errors']

    def test_put_replaces(self, auth_client, address, geo):
        response = auth_client.put(f'{BASE}/addresses/{address.pk}/', {
            'province': geo.gbao.pk, 'city': geo.murghob.pk,
        }, format='json')

        assert response.status_code == 200
        assert response.data['city']['id'] == geo.murghob.pk
        assert response.data['district'] is None
        assert response.data['settlement'] is None

    def test_delete(self, auth_client, address):
        response = auth_client.delete(f'{BASE}/addresses/{address.pk}/')

        assert response.status_code == 204
        assert not Address.objects.filter(pk=address.pk).exists()


class TestErrorShape:
    """Input errors share the domain error body."""

    def test_malformed_id(self, auth_client, db):
        response = auth_client.post(f'{BASE}/addresses/', {'province': 'first'}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'VALIDATION_ERROR'
        assert list(response.data['details']['field_errors']) == ['province']

    def test_unknown_node_kind(self, staff_client, db):
        response = staff_client.post(f'{BASE}/nodes/', {'kind': 'oblast'}, format='json')

        assert response.status_code == 400
        assert 'kind' in response.data['details']['field_errors']

    def test_oversized_id(self, api_client, db):
        response = api_client.post(f'{BASE}/addresses/validate/', {'province': 10 ** 20}, format='json')

        assert response.status_code == 400
        assert list(response.data['details']['field_errors']) == ['province']

    def test_oversized_suburb_id(self, auth_client, geo):
        response = auth_client.post(f'{BASE}/addresses/', {
            'province': geo.sughd.pk, 'city': geo.khujand.pk, 'suburbs': [geo.center.pk, 10 ** 20],
        }, format='json')

        assert response.status_code == 400
        assert 'suburbs' in response.data['details']['field_errors']
