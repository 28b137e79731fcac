"""
Admin configuration for the roster
"""
from django.contrib import admin

from roster_management.apps.members.domain import eligibility
from roster_management.apps.members.infrastructure.clock import SystemClock
from roster_management.apps.members.infrastructure.repositories import member_to_snapshot
from roster_management.apps.members.models import CustomField, Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    """Admin for roster members"""

    list_display = [
        'last_name',
        'first_name',
        'rank',
        'team',
        'duty_title',
        'supervisor',
        'dor_date',
        'eligibility_display',
    ]

    list_filter = [
        'rank',
        'team',
        'btz_status',
        'promotion_status',
        'medical_profile',
    ]

    search_fields = [
        'row_id',
        'last_name',
        'first_name',
        'duty_title',
        'hometown',
    ]

    readonly_fields = ['row_id', 'original_dor', 'created_at', 'updated_at']
    raw_id_fields = ['supervisor']
    list_select_related = ['supervisor']

    fieldsets = (
        ('Identity', {
            'fields': ('row_id', 'rank', 'last_name', 'first_name', 'hometown')
        }),
        ('Assignment', {
            'fields': ('team', 'duty_title', 'status', 'supervisor', 'sup_start_date')
        }),
        ('Service dates', {
            'fields': ('tis_date', 'dor_date', 'original_dor')
        }),
        ('Promotion boards', {
            'fields': ('btz_status', 'promotion_status', 'promotion_date')
        }),
        ('Additional', {
            'fields': ('medical_profile', 'custom_data'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def eligibility_display(self, obj):
        verdict = eligibility.evaluate(member_to_snapshot(obj), SystemClock().today())
        return f"{verdict.status}: {verdict.note}"
    eligibility_display.short_description = 'Eligibility'


@admin.register(CustomField)
class CustomFieldAdmin(admin.ModelAdmin):
    list_display = ['name', 'field_id', 'field_type', 'show_on_card', 'created_at']
    list_filter = ['field_type', 'show_on_card']
    readonly_fields = ['field_id', 'created_at']
