"""Common Locations - API Views.

REST API endpoints for the administrative geography and user addresses.
Supports cascading pickers, search, validation and live previews.
Every read takes `?locale=` (tj, ru, eng; default tj).
"""

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common.core.api import ErrorResponseSerializer, IsAdminOrReadOnly
from apps.common.core.exceptions import LocaleNotFound, ValidationError
from .formatting import AddressFormatter
from .models import NodeKind, default_locale, is_supported_locale
from .selection import AddressSelection, validate_selection
from .serializers import (
    AddressInputSerializer,
    AddressPreviewSerializer,
    AddressSerializer,
    CitySerializer,
    DistrictSerializer,
    LocationNodeSerializer,
    NodeCreateSerializer,
    ProvinceSerializer,
    SettlementSerializer,
    ValidationResultSerializer,
)
from .services import AddressService, LocationSelector, LocationService
from .translations import TranslationIndex


LOCALE_PARAM = OpenApiParameter('locale', str, enum=['tj', 'ru', 'eng'], description='Title locale (default tj)')
PARENT_PARAM = OpenApiParameter('parent', int, description='Only nodes under this parent')


def get_locale(request) -> str:
    locale = request.query_params.get('locale') or default_locale()
    if not is_supported_locale(locale):
        raise LocaleNotFound(details={'locale': locale})
    return locale


def _int_param(request, name, default=None):
    value = request.query_params.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(field_errors={name: ['Must be an integer']})


class LocaleMixin:
    """Builds serializer context with one TranslationIndex per request."""

    def get_serializer_context(self, request, nodes=()):
        locale = get_locale(request)
        index = TranslationIndex()
        return {
            'request': request,
            'locale': locale,
            'index': index,
            'titles': index.titles(nodes, locale) if nodes else {},
        }


class NodeListView(LocaleMixin, APIView):
    """List active nodes of one kind, optionally under `?parent=`."""
    permission_classes = [permissions.AllowAny]
    kind = None
    serializer_class = LocationNodeSerializer

    def list(self, request):
        locale = get_locale(request)
        nodes = LocationSelector.list_nodes(self.kind, _int_param(request, 'parent'))
        context = self.get_serializer_context(request, nodes)
        serializer = self.serializer_class(nodes, many=True, context=context)
        return Response({
            'count': len(nodes),
            'locale': locale,
            'results': serializer.data,
        })


class NodeDetailView(LocaleMixin, APIView):
    """Get one node of a given kind."""
    permission_classes = [permissions.AllowAny]
    kind = None
    serializer_class = LocationNodeSerializer

    def retrieve(self, request, pk):
        get_locale(request)
        node = LocationSelector.get_node(pk, kind=self.kind)
        context = self.get_serializer_context(request, [node])
        return Response(self.serializer_class(node, context=context).data)


class ProvinceListView(NodeListView):
    kind = NodeKind.PROVINCE
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: LocationNodeSerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class ProvinceDetailView(NodeDetailView):
    kind = NodeKind.PROVINCE
    serializer_class = ProvinceSerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: ProvinceSerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class CityListView(NodeListView):
    kind = NodeKind.CITY
    serializer_class = CitySerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: CitySerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class CityDetailView(NodeDetailView):
    kind = NodeKind.CITY
    serializer_class = CitySerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: CitySerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class DistrictListView(NodeListView):
    kind = NodeKind.DISTRICT
    serializer_class = DistrictSerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: DistrictSerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class DistrictDetailView(NodeDetailView):
    kind = NodeKind.DISTRICT
    serializer_class = DistrictSerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: DistrictSerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class SuburbListView(NodeListView):
    kind = NodeKind.SUBURB
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: LocationNodeSerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class SuburbDetailView(NodeDetailView):
    kind = NodeKind.SUBURB
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: LocationNodeSerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class SettlementListView(NodeListView):
    kind = NodeKind.SETTLEMENT
    serializer_class = SettlementSerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: SettlementSerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class SettlementDetailView(NodeDetailView):
    kind = NodeKind.SETTLEMENT
    serializer_class = SettlementSerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: SettlementSerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class CommunityListView(NodeListView):
    kind = NodeKind.COMMUNITY
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: LocationNodeSerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class CommunityDetailView(NodeDetailView):
    kind = NodeKind.COMMUNITY
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: LocationNodeSerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class VillageListView(NodeListView):
    kind = NodeKind.VILLAGE
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM, PARENT_PARAM], responses={200: LocationNodeSerializer(many=True)}, tags=['Geography'])
    def get(self, request):
        return self.list(request)


class VillageDetailView(NodeDetailView):
    kind = NodeKind.VILLAGE
    serializer_class = LocationNodeSerializer

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: LocationNodeSerializer, 404: ErrorResponseSerializer}, tags=['Geography'])
    def get(self, request, pk):
        return self.retrieve(request, pk)


class NodeCreateView(APIView):
    """Create a node (admin only)."""
    permission_classes = [IsAdminOrReadOnly]

    @extend_schema(request=NodeCreateSerializer, responses={201: LocationNodeSerializer, 400: ErrorResponseSerializer},
                   tags=['Geography admin'])
    def post(self, request):
        serializer = NodeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        node = LocationService.create(
            kind=data['kind'],
            parent_id=data.get('parent'),
            title=data.get('title', ''),
            description=data.get('description', ''),
            translations=data.get('translations'),
            sort_order=data.get('sort_order', 0),
        )
        return Response(
            LocationNodeSerializer(node, context={'locale': default_locale()}).data,
            status=status.HTTP_201_CREATED,
        )


class NodeDeleteView(APIView):
    """Delete a node and its subtree; addresses lose the reference but survive."""
    permission_classes = [IsAdminOrReadOnly]

    @extend_schema(responses={200: OpenApiResponse(description='{"deleted": id, "detached_addresses": n}')},
                   tags=['Geography admin'])
    def delete(self, request, pk):
        detached = LocationService.delete(pk)
        return Response({'deleted': pk, 'detached_addresses': detached})


class NodeChildrenView(LocaleMixin, APIView):
    """Children of a node, optionally filtered by `?kind=`."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[LOCALE_PARAM, OpenApiParameter('kind', str, enum=NodeKind.values)],
                   responses={200: LocationNodeSerializer(many=True)}, tags=['Geography'])
    def get(self, request, pk):
        get_locale(request)
        children = LocationService.get_children(pk, request.query_params.get('kind') or None)
        context = self.get_serializer_context(request, children)
        return Response({
            'count': len(children),
            'results': LocationNodeSerializer(children, many=True, context=context).data,
        })


class NodeAncestorsView(LocaleMixin, APIView):
    """Ancestor chain root -> node."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: LocationNodeSerializer(many=True)}, tags=['Geography'])
    def get(self, request, pk):
        get_locale(request)
        chain = LocationService.get_ancestor_chain(pk)
        context = self.get_serializer_context(request, chain)
        return Response(LocationNodeSerializer(chain, many=True, context=context).data)


class LocationSearchView(LocaleMixin, APIView):
    """
    Search nodes by title in any locale.
    Case-insensitive substring match over primary titles and translations.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter('q', str, required=True),
            OpenApiParameter('kind', str, enum=NodeKind.values),
            OpenApiParameter('limit', int),
            LOCALE_PARAM,
        ],
        responses={200: LocationNodeSerializer(many=True), 400: ErrorResponseSerializer},
        tags=['Geography'],
    )
    def get(self, request):
        get_locale(request)
        query = request.query_params.get('q', '').strip()
        limit = _int_param(request, 'limit', 20)
        if limit < 1:
            raise ValidationError(field_errors={'limit': ['Must be at least 1']})
        limit = min(limit, 100)

        if len(query) < 2:
            raise ValidationError(message='Query must be at least 2 characters', field_errors={'q': ['Too short']})

        results = LocationSelector.search(query, kind=request.query_params.get('kind') or None, limit=limit)
        context = self.get_serializer_context(request, results)
        return Response({
            'query': query,
            'count': len(results),
            'results': LocationNodeSerializer(results, many=True, context=context).data,
        })


class StatisticsView(APIView):
    """Node counts per kind."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(responses={200: OpenApiResponse(description='{kind: count}')}, tags=['Geography'])
    def get(self, request):
        return Response(LocationService.get_statistics())


class ValidateAddressView(APIView):
    """Run the address rules without storing anything."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=AddressInputSerializer, responses={200: ValidationResultSerializer}, tags=['Addresses'])
    def post(self, request):
        serializer = AddressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = validate_selection(AddressSelection.from_mapping(serializer.validated_data))
        return Response({
            'valid': result.is_valid,
            'violations': [violation.to_dict() for violation in result.violations],
            'address': result.data.to_dict() if result.data else None,
        })


class AddressPreviewView(APIView):
    """Live full/short text for an in-progress selection."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[LOCALE_PARAM], request=AddressInputSerializer,
                   responses={200: AddressPreviewSerializer}, tags=['Addresses'])
    def post(self, request):
        locale = get_locale(request)
        serializer = AddressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        selection = AddressSelection.from_mapping(serializer.validated_data)
        result = validate_selection(selection)
        rendered = AddressFormatter(locale).render(result.data if result.is_valid else selection)
        return Response({
            **rendered,
            'valid': result.is_valid,
            'violations': [violation.to_dict() for violation in result.violations],
        })


class AddressContextMixin:
    def _context(self, request):
        return {'request': request, 'locale': get_locale(request), 'index': TranslationIndex()}


class AddressListView(AddressContextMixin, APIView):
    """Addresses attached to the current user."""
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: AddressSerializer(many=True)}, tags=['Addresses'])
    def get(self, request):
        addresses = AddressService.addresses_for(request.user)
        return Response(AddressSerializer(addresses, many=True, context=self._context(request)).data)

    @extend_schema(parameters=[LOCALE_PARAM], request=AddressInputSerializer,
                   responses={201: AddressSerializer, 400: ErrorResponseSerializer}, tags=['Addresses'])
    def post(self, request):
        context = self._context(request)
        serializer = AddressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        address = AddressService.create(serializer.validated_data, owner=request.user)
        return Response(AddressSerializer(address, context=context).data, status=status.HTTP_201_CREATED)


class AddressDetailView(AddressContextMixin, APIView):
    """Read, replace, patch or detach one of the current user's addresses."""
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(parameters=[LOCALE_PARAM], responses={200: AddressSerializer, 404: ErrorResponseSerializer},
                   tags=['Addresses'])
    def get(self, request, pk):
        address = AddressService.get_address(pk, owner=request.user)
        return Response(AddressSerializer(address, context=self._context(request)).data)

    @extend_schema(parameters=[LOCALE_PARAM], request=AddressInputSerializer,
                   responses={200: AddressSerializer, 400: ErrorResponseSerializer}, tags=['Addresses'])
    def put(self, request, pk):
        context = self._context(request)
        serializer = AddressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        address = AddressService.replace(pk, serializer.validated_data, owner=request.user)
        return Response(AddressSerializer(address, context=context).data)

    @extend_schema(parameters=[LOCALE_PARAM], request=AddressInputSerializer,
                   responses={200: AddressSerializer, 400: ErrorResponseSerializer}, tags=['Addresses'])
    def patch(self, request, pk):
        context = self._context(request)
        serializer = AddressInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        address = AddressService.patch(pk, serializer.validated_data, owner=request.user)
        return Response(AddressSerializer(address, context=context).data)

    @extend_schema(responses={204: None, 404: ErrorResponseSerializer}, tags=['Addresses'])
    def delete(self, request, pk):
        AddressService.detach_owner(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
