"""Tests for the load_geography management command."""
import json
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.common.locations.models import Address, LocationNode, NodeKind, Translation
from apps.common.locations.services import AddressService, LocationService

pytestmark = pytest.mark.django_db

SEED_TOTALS = {
    'province': 5, 'city': 5, 'district': 5, 'suburb': 7,
    'settlement': 3, 'community': 2, 'village': 2,
}


def run(*args):
    out = StringIO()
    call_command('load_geography', *args, stdout=out)
    return out.getvalue()


class TestLoadGeography:
    def test_loads_builtin_dataset(self):
        output = run()

        assert LocationService.get_statistics() == SEED_TOTALS
        assert 'Created: 5 province, 5 city, 5 district, 7 suburb' in output

    def test_translations_loaded(self):
        run()
        khorog = LocationNode.objects.get(kind=NodeKind.SETTLEMENT, title='Хорог')

        assert khorog.parent.title == 'Рошткала'
        assert dict(khorog.translations.values_list('locale', 'title')) == {'tj': 'Хоруғ', 'ru': 'Хорог', 'eng': 'Khorog'}

    def test_idempotent(self):
        run()
        translations = Translation.objects.count()

        output = run()

        assert LocationService.get_statistics() == SEED_TOTALS
        assert Translation.objects.count() == translations
        assert 'Created: 0 province, 0 city' in output

    def test_dry_run(self):
        output = run('--dry-run')

        assert LocationNode.objects.count() == 0
        assert 'DRY RUN' in output
        assert 'Found 5 province, 5 city, 5 district, 7 suburb, 3 settlement, 2 community, 2 village' in output

    def test_stats(self, geo):
        output = run('--stats')
        assert 'Current database: 2 province, 2 city, 2 district, 2 suburb, 1 settlement, 1 community, 1 village' in output

    def test_force_replaces_and_detaches(self, geo, user):
        address = AddressService.create({'province': geo.gbao.pk, 'city': geo.murghob.pk}, owner=user)

        output = run('--force')

        assert 'FORCE mode' in output
        assert LocationService.get_statistics() == SEED_TOTALS
        address = Address.objects.get(pk=address.pk)
        assert address.is_orphaned

    def test_file(self, tmp_path):
        path = tmp_path / 'geo.json'
        path.write_text(json.dumps([{
            'translations': {'tj': 'Вилояти Суғд', 'ru': 'Согдийская область', 'eng': 'Sughd Province'},
            'districts': [{
                'translations': {'ru': 'Аштский район'},
                'communities': [{'translations': {'ru': 'Джамоат Ошоба'}}],
            }],
        }], ensure_ascii=False), encoding='utf-8')

        run('--file', str(path))

        community = LocationNode.objects.get(kind=NodeKind.COMMUNITY)
        assert community.title == 'Джамоат Ошоба'
        assert [n.kind for n in community.ancestors()] == ['province', 'district', 'community']

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(CommandError):
            run('--file', str(tmp_path / 'missing.json'))

    def test_file_with_unsupported_locale(self, tmp_path):
        path = tmp_path / 'geo.json'
        path.write_text(json.dumps([{
            'translations': {'ru': 'Согдийская область', 'xx': 'Икс'},
        }], ensure_ascii=False), encoding='utf-8')

        with pytest.raises(CommandError, match='UNSUPPORTED_LOCALE'):
            run('--file', str(path))

        assert not Translation.objects.filter(locale='xx').exists()
        assert LocationNode.objects.count() == 0
