import uuid
from django.db import models

from roster_management.apps.members.domain.ranks import ALL_RANKS, RANK_ABBREVIATIONS, rank_display
from roster_management.apps.members.domain.value_objects import BtzStatus, PromotionStatus


def generate_row_id() -> str:
    return f"card-{uuid.uuid4().hex[:12]}"


def generate_field_id() -> str:
    return f"field_{uuid.uuid4().hex[:12]}"


RANK_CHOICES = [(rank, f"{rank} ({RANK_ABBREVIATIONS[rank]})") for rank in ALL_RANKS]

SELECTION_CHOICES = [
    (BtzStatus.NONE.value, 'None'),
    (BtzStatus.SELECTED.value, 'Selected'),
    (BtzStatus.NOT_SELECTED.value, 'Not selected'),
]


class Member(models.Model):
    """Roster member"""

    class Team(models.TextChoices):
        INBOUND = 'inbound', 'Inbound'
        FLIGHT_LEADS = 'flight-leads', 'Flight Leads'
        BRASS = 'brass', 'Brass'
        SBIRS = 'sbirs', 'SBIRS'

    class MedicalProfile(models.TextChoices):
        NONE = '', 'None'
        TEMPORARY = 'Temporary', 'Temporary'
        PERMANENT = 'Permanent', 'Permanent'

    row_id = models.CharField(max_length=40, unique=True, default=generate_row_id, editable=False)

    # Identity and assignment
    rank = models.CharField(max_length=4, choices=RANK_CHOICES)
    last_name = models.CharField(max_length=100)
    first_name = models.CharField(max_length=100)
    duty_title = models.CharField(max_length=100, blank=True)
    team = models.CharField(max_length=20, choices=Team.choices, default=Team.INBOUND)
    status = models.CharField(max_length=50, blank=True, help_text='Duty status shown on the roster card')
    supervisor = models.ForeignKey(
        'self',
        to_field='row_id',
        db_column='supervisor_row_id',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='supervisees',
    )
    sup_start_date = models.DateField(null=True, blank=True)

    # Service dates
    tis_date = models.DateField(null=True, blank=True, verbose_name='TIS date')
    dor_date = models.DateField(null=True, blank=True, verbose_name='Date of rank')
    original_dor = models.DateField(
        null=True,
        blank=True,
        help_text='Date of rank held before a below-the-zone promotion',
    )

    # Promotion boards
    btz_status = models.CharField(max_length=15, choices=SELECTION_CHOICES, default=BtzStatus.NONE.value)
    promotion_status = models.CharField(
        max_length=15, choices=SELECTION_CHOICES, default=PromotionStatus.NONE.value
    )
    promotion_date = models.DateField(null=True, blank=True)

    # Additional information
    hometown = models.CharField(max_length=100, blank=True)
    medical_profile = models.CharField(
        max_length=20, choices=MedicalProfile.choices, default=MedicalProfile.NONE, blank=True
    )
    custom_data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'members'
        verbose_name = 'Member'
        verbose_name_plural = 'Members'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{rank_display(self.rank)} {self.last_name}, {self.first_name}"


class CustomField(models.Model):
    """Administrator-defined field captured for every member"""

    class FieldType(models.TextChoices):
        TEXT = 'text', 'Text'
        NUMBER = 'number', 'Number'
        DATE = 'date', 'Date'

    field_id = models.CharField(max_length=40, unique=True, default=generate_field_id, editable=False)
    name = models.CharField(max_length=100)
    field_type = models.CharField(max_length=10, choices=FieldType.choices, default=FieldType.TEXT)
    show_on_card = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'custom_fields'
        ordering = ['created_at', 'id']

    def __str__(self):
        return self.name
