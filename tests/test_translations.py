"""Tests for locale-aware title resolution."""
import pytest

from apps.common.locations.models import NodeKind, Translation
from apps.common.locations.services import LocationService
from apps.common.locations.translations import TranslationIndex, pick_title


class TestPickTitle:
    """Fallback chain over already-loaded data."""

    def test_requested_locale_wins(self):
        title = pick_title('city', 7, 'Худжанд', {'ru': 'Худжанд', 'tj': 'Хуҷанд', 'eng': 'Khujand'}, 'eng', 'tj')
        assert title == 'Khujand'

    def test_falls_back_to_default_locale(self):
        assert pick_title('city', 7, 'Худжанд', {'tj': 'Хуҷанд'}, 'eng', 'tj') == 'Хуҷанд'

    def test_falls_back_to_primary_title(self):
        assert pick_title('city', 7, 'Худжанд', {}, 'eng', 'tj') == 'Худжанд'

    def test_synthesizes_kind_and_id(self):
        assert pick_title('city', 7, '', {}, 'eng', 'tj') == 'City #7'

    def test_blank_translation_is_a_miss(self):
        assert pick_title('suburb', 3, 'Центр', {'eng': '  '}, 'eng', 'tj') == 'Центр'

    def test_unsupported_locale_behaves_like_miss(self):
        assert pick_title('province', 1, 'ГБАО', {'tj': 'ВМКБ'}, 'fr', 'tj') == 'ВМКБ'

    @pytest.mark.parametrize('locale', ['tj', 'ru', 'eng', 'fr', '', None, 'xx-YY'])
    def test_never_empty(self, locale):
        assert pick_title('village', 9, None, {}, locale, 'tj')


@pytest.mark.django_db
class TestTranslationIndex:
    """Database-backed resolution and caching."""

    def test_resolves_each_locale(self, geo):
        index = TranslationIndex()
        assert index.resolve(geo.khujand, 'ru') == 'Худжанд'
        assert index.resolve(geo.khujand, 'tj') == 'Хуҷанд'
        assert index.resolve(geo.khujand, 'eng') == 'Khujand'

    def test_default_locale_is_tajik(self, geo):
        assert TranslationIndex().resolve(geo.gbao, None) == 'ВМКБ'

    def test_unsupported_locale_resolves_like_default(self, geo):
        index = TranslationIndex()
        assert index.resolve(geo.gbao, 'de') == index.resolve(geo.gbao, 'tj')

    def test_missing_translation_falls_back_to_default(self, geo):
        Translation.objects.filter(node=geo.khorog, locale='eng').delete()
        assert TranslationIndex().resolve(geo.khorog, 'eng') == 'Хоруғ'

    def test_missing_everything_synthesizes(self, geo):
        node = LocationService.create(NodeKind.VILLAGE, geo.khorog.pk, '')
        assert TranslationIndex().resolve(node, 'ru') == f'Village #{node.pk}'

    def test_configured_default_locale(self, geo, settings):
        settings.GEOGRAPHY_DEFAULT_LOCALE = 'ru'
        Translation.objects.filter(node=geo.khorog, locale='eng').delete()
        assert TranslationIndex().resolve(geo.khorog, 'eng') == 'Хорог'

    def test_bulk_titles(self, geo):
        titles = TranslationIndex().titles([geo.gbao, geo.roshtqala, geo.khorog], 'ru')
        assert titles == {geo.gbao.pk: 'ГБАО', geo.roshtqala.pk: 'Рошткала', geo.khorog.pk: 'Хорог'}

    def test_bulk_titles_use_prefetched_translations(self, geo, django_assert_num_queries):
        nodes = list(type(geo.gbao).objects.filter(pk__in=[geo.gbao.pk, geo.sughd.pk]).prefetch_related('translations'))
        with django_assert_num_queries(0):
            titles = TranslationIndex(use_cache=False).titles(nodes, 'eng')
        assert titles[geo.gbao.pk] == 'GBAO'

    def test_cache_dropped_when_translation_changes(self, geo):
        index = TranslationIndex()
        assert index.resolve(geo.khujand, 'ru') == 'Худжанд'

        LocationService.set_translation(geo.khujand.pk, 'ru', 'Ходжент')

        assert index.resolve(geo.khujand, 'ru') == 'Ходжент'

    def test_cache_dropped_when_translation_deleted(self, geo):
        index = TranslationIndex()
        assert index.resolve(geo.murghob, 'eng') == 'Murghob'

        Translation.objects.get(node=geo.murghob, locale='eng').delete()

        assert index.resolve(geo.murghob, 'eng') == 'Мурғоб'

    def test_cache_dropped_when_title_changes(self, geo):
        node = LocationService.create(NodeKind.SUBURB, geo.khujand.pk, 'Старый город')
        index = TranslationIndex()
        assert index.resolve(node, 'eng') == 'Старый город'

        LocationService.update(node.pk, title='Старый город (Калъа)')

        assert index.resolve(node, 'eng') == 'Старый город (Калъа)'

    def test_stale_instance_does_not_refill_cache(self, geo):
        stale = type(geo.murghob).objects.get(pk=geo.murghob.pk)
        LocationService.update(geo.murghob.pk, title='Новый Мургаб')
        Translation.objects.filter(node=geo.murghob).delete()

        index = TranslationIndex()
        assert index.resolve(stale, 'ru') == 'Новый Мургаб'

        fresh = type(geo.murghob).objects.get(pk=geo.murghob.pk)
        assert index.resolve(fresh, 'ru') == 'Новый Мургаб'

    def test_uncached_index_uses_given_instance(self, geo):
        geo.murghob.title = 'Мургоб'
        Translation.objects.filter(node=geo.murghob).delete()
        assert TranslationIndex(use_cache=False).resolve(geo.murghob, 'ru') == 'Мургоб'
