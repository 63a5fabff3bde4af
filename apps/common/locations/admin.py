"""Common Locations - Admin Configuration."""
from django import forms
from django.contrib import admin
from django.core.exceptions import NON_FIELD_ERRORS
from django.utils.html import format_html
from unfold.admin import ModelAdmin, TabularInline

from apps.common.core.exceptions import InvalidAddress
from .formatting import AddressFormatter
from .models import Address, AddressAttachment, LocationNode, Translation
from .selection import build_address_data
from .translations import TranslationIndex


class TranslationInline(TabularInline):
    model = Translation
    extra = 0
    fields = ['locale', 'title']


@admin.register(LocationNode)
class LocationNodeAdmin(ModelAdmin):
    list_display = ['id', 'resolved_title_display', 'kind', 'parent', 'children_count_display', 'is_active', 'sort_order']
    list_filter = ['kind', 'is_active']
    search_fields = ['title', 'translations__title']
    list_editable = ['is_active', 'sort_order']
    autocomplete_fields = ['parent']
    ordering = ['kind', 'sort_order', 'title']
    inlines = [TranslationInline]

    fieldsets = (
        ('Basic Info', {'fields': ('kind', 'parent', 'title', 'description')}),
        ('Settings', {'fields': ('is_active', 'sort_order')}),
    )

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            readonly.append('kind')
        return readonly

    @admin.display(description='Title')
    def resolved_title_display(self, obj):
        return TranslationIndex().resolve(obj, None)

    @admin.display(description='Children')
    def children_count_display(self, obj):
        count = obj.children.count()
        return format_html('<span style="font-weight: bold;">{}</span>', count)


class AddressAdminForm(forms.ModelForm):
    class Meta:
        model = Address
        fields = ['province', 'city', 'suburbs', 'district', 'settlement', 'community', 'village', 'line']

    def clean(self):
        cleaned_data = super().clean()
        selection = {
            name: getattr(cleaned_data.get(name), 'pk', None)
            for name in ('province', 'city', 'district', 'settlement', 'community', 'village')
        }
        selection['suburbs'] = [node.pk for node in cleaned_data.get('suburbs') or []]
        selection['line'] = cleaned_data.get('line', '')
        try:
            data = build_address_data(selection)
        except InvalidAddress as e:
            errors = {}
            for violation in e.violations:
                field = violation.field if violation.field in self.fields else NON_FIELD_ERRORS
                errors.setdefault(field, []).append(violation.message)
            raise forms.ValidationError(errors)
        cleaned_data['line'] = data.line
        return cleaned_data


class AddressAttachmentInline(TabularInline):
    model = AddressAttachment
    extra = 0
    fields = ['content_type', 'object_id', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Address)
class AddressAdmin(ModelAdmin):
    form = AddressAdminForm
    list_display = ['id', 'full_display', 'short_display', 'is_orphaned', 'created_at']
    search_fields = ['line']
    autocomplete_fields = ['province', 'city', 'suburbs', 'district', 'settlement', 'community', 'village']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [AddressAttachmentInline]

    fieldsets = (
        ('Province', {'fields': ('province',)}),
        ('City branch', {'fields': ('city', 'suburbs')}),
        ('District branch', {'fields': ('district', 'settlement', 'community', 'village')}),
        ('Details', {'fields': ('line', 'created_at', 'updated_at')}),
    )

    @admin.display(description='Address')
    def full_display(self, obj):
        return AddressFormatter().full(obj)

    @admin.display(description='Short')
    def short_display(self, obj):
        return AddressFormatter().short(obj)

    @admin.display(description='Orphaned', boolean=True)
    def is_orphaned(self, obj):
        return obj.is_orphaned
