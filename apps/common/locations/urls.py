"""Common Locations - URL Configuration."""
from django.urls import path
from .views import (
    ProvinceListView, ProvinceDetailView,
    CityListView, CityDetailView,
    DistrictListView, DistrictDetailView,
    SuburbListView, SuburbDetailView,
    SettlementListView, SettlementDetailView,
    CommunityListView, CommunityDetailView,
    VillageListView, VillageDetailView,
    NodeCreateView, NodeDeleteView, NodeChildrenView, NodeAncestorsView,
    LocationSearchView, StatisticsView,
    ValidateAddressView, AddressPreviewView,
    AddressListView, AddressDetailView,
)

app_name = 'geography'

urlpatterns = [
    # Nodes by kind
    path('provinces/', ProvinceListView.as_view(), name='province-list'),
    path('provinces/<int:pk>/', ProvinceDetailView.as_view(), name='province-detail'),
    path('cities/', CityListView.as_view(), name='city-list'),
    path('cities/<int:pk>/', CityDetailView.as_view(), name='city-detail'),
    path('districts/', DistrictListView.as_view(), name='district-list'),
    path('districts/<int:pk>/', DistrictDetailView.as_view(), name='district-detail'),
    path('suburbs/', SuburbListView.as_view(), name='suburb-list'),
    path('suburbs/<int:pk>/', SuburbDetailView.as_view(), name='suburb-detail'),
    path('settlements/', SettlementListView.as_view(), name='settlement-list'),
    path('settlements/<int:pk>/', SettlementDetailView.as_view(), name='settlement-detail'),
    path('communities/', CommunityListView.as_view(), name='community-list'),
    path('communities/<int:pk>/', CommunityDetailView.as_view(), name='community-detail'),
    path('villages/', VillageListView.as_view(), name='village-list'),
    path('villages/<int:pk>/', VillageDetailView.as_view(), name='village-detail'),

    # Hierarchy
    path('nodes/', NodeCreateView.as_view(), name='node-create'),
    path('nodes/<int:pk>/', NodeDeleteView.as_view(), name='node-delete'),
    path('nodes/<int:pk>/children/', NodeChildrenView.as_view(), name='node-children'),
    path('nodes/<int:pk>/ancestors/', NodeAncestorsView.as_view(), name='node-ancestors'),

    # Search & utilities
    path('search/', LocationSearchView.as_view(), name='location-search'),
    path('statistics/', StatisticsView.as_view(), name='statistics'),

    # Addresses
    path('addresses/validate/', ValidateAddressView.as_view(), name='address-validate'),
    path('addresses/preview/', AddressPreviewView.as_view(), name='address-preview'),
    path('addresses/', AddressListView.as_view(), name='address-list'),
    path('addresses/<int:pk>/', AddressDetailView.as_view(), name='address-detail'),
]
