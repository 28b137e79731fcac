"""
Serializers for the roster API
"""
from typing import Optional

from rest_framework import serializers

from roster_management.apps.members.domain import eligibility, roster
from roster_management.apps.members.domain.ranks import SUPERVISOR_RANKS, rank_display
from roster_management.apps.members.infrastructure.clock import SystemClock
from roster_management.apps.members.infrastructure.repositories import member_to_snapshot
from roster_management.apps.members.models import CustomField, Member

ISO_DATE_FORMATS = ['%Y-%m-%d']


class CustomFieldSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomField
        fields = ['id', 'field_id', 'name', 'field_type', 'show_on_card', 'created_at']
        read_only_fields = ['id', 'field_id', 'created_at']

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Field name cannot be empty.")
        return value


class MemberSerializer(serializers.ModelSerializer):
    """
    Member with its current eligibility verdict.

    The verdict is computed for ``context['today']`` so one response judges
    every member against the same day. Promotion state is read-only here and
    changes only through the promotion actions.
    """
    supervisor = serializers.SlugRelatedField(
        slug_field='row_id',
        queryset=Member.objects.all(),
        required=False,
        allow_null=True,
    )
    tis_date = serializers.DateField(required=False, allow_null=True, input_formats=ISO_DATE_FORMATS)
    dor_date = serializers.DateField(required=False, allow_null=True, input_formats=ISO_DATE_FORMATS)
    rank_display = serializers.SerializerMethodField()
    supervisor_name = serializers.SerializerMethodField()
    eligibility = serializers.SerializerMethodField()
    card_fields = serializers.SerializerMethodField()

    class Meta:
        model = Member
        fields = [
            'id', 'row_id', 'rank', 'rank_display', 'last_name', 'first_name', 'duty_title',
            'team', 'status', 'supervisor', 'supervisor_name', 'sup_start_date',
            'tis_date', 'dor_date', 'original_dor', 'btz_status', 'promotion_status',
            'promotion_date', 'hometown', 'medical_profile', 'custom_data', 'card_fields',
            'eligibility', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'row_id', 'sup_start_date', 'original_dor', 'btz_status',
            'promotion_status', 'promotion_date', 'created_at', 'updated_at',
        ]

    def get_rank_display(self, obj: Member) -> str:
        return rank_display(obj.rank)

    def get_supervisor_name(self, obj: Member) -> Optional[str]:
        if obj.supervisor:
            return f"{rank_display(obj.supervisor.rank)} {obj.supervisor.last_name}"
        return None

    def get_eligibility(self, obj: Member) -> dict:
        today = self.context.get('today') or SystemClock().today()
        return eligibility.evaluate(member_to_snapshot(obj), today).as_dict()

    def _custom_fields(self):
        if 'custom_fields' not in self.context:
            self.context['custom_fields'] = list(CustomField.objects.all())
        return self.context['custom_fields']

    def get_card_fields(self, obj: Member) -> list:
        data = obj.custom_data or {}
        return [
            {'field_id': field.field_id, 'name': field.name, 'value': data[field.field_id]}
            for field in self._custom_fields()
            if field.show_on_card and data.get(field.field_id)
        ]

    def validate_custom_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("custom_data must be an object keyed by field id.")
        known = {field.field_id for field in self._custom_fields()}
        unknown = sorted(set(value) - known)
        if unknown:
            raise serializers.ValidationError(f"Unknown custom fields: {', '.join(unknown)}")
        return value

    def _check_supervisor(self, supervisor: Member):
        instance = self.instance
        if instance is not None:
            if instance.supervisor_id == supervisor.row_id:
                return
            if supervisor.row_id == instance.row_id:
                raise serializers.ValidationError({'supervisor': "A member cannot supervise themselves."})
        if supervisor.rank not in SUPERVISOR_RANKS:
            raise serializers.ValidationError(
                {'supervisor': f"{rank_display(supervisor.rank)} {supervisor.last_name} cannot supervise."}
            )
        if instance is not None:
            members = [member_to_snapshot(m) for m in Member.objects.all()]
            if roster.creates_supervision_cycle(members, instance.row_id, supervisor.row_id):
                raise serializers.ValidationError(
                    {'supervisor': "This assignment would create a circular supervision chain."}
                )

    def validate(self, attrs):
        instance = self.instance
        duty_title = attrs.get('duty_title', instance.duty_title if instance else '')
        team = attrs.get('team', instance.team if instance else None)
        status = attrs.get('status', instance.status if instance else '')
        supervisor = attrs.get('supervisor', instance.supervisor if instance else None)

        team, status, supervisor_id = roster.normalize_assignment(
            duty_title,
            team,
            status,
            supervisor.row_id if supervisor else None,
            default_team=Member.Team.INBOUND,
        )
        attrs['team'] = team
        attrs['status'] = status
        if supervisor_id is None:
            attrs['supervisor'] = None
        elif 'supervisor' in attrs:
            self._check_supervisor(attrs['supervisor'])
        return attrs

    def update(self, instance, validated_data):
        # Custom data is merged so a partial form keeps values it did not send
        if 'custom_data' in validated_data:
            validated_data['custom_data'] = {**(instance.custom_data or {}), **validated_data['custom_data']}
        return super().update(instance, validated_data)


class PromoteSerializer(serializers.Serializer):
    new_dor = serializers.DateField(input_formats=ISO_DATE_FORMATS)


class BtzSelectionSerializer(serializers.Serializer):
    selected = serializers.BooleanField()
    new_dor = serializers.DateField(required=False, allow_null=True, input_formats=ISO_DATE_FORMATS)


class BoardSelectionSerializer(serializers.Serializer):
    selected = serializers.BooleanField()
    promotion_date = serializers.DateField(required=False, allow_null=True, input_formats=ISO_DATE_FORMATS)

    def validate(self, attrs):
        if attrs['selected'] and not attrs.get('promotion_date'):
            raise serializers.ValidationError({'promotion_date': "Required when the member was selected."})
        return attrs


class MoveSerializer(serializers.Serializer):
    team = serializers.ChoiceField(choices=Member.Team.choices)


class SupervisorSerializer(serializers.Serializer):
    supervisor = serializers.CharField(allow_blank=True, allow_null=True)


class ProcessPromotionsSerializer(serializers.Serializer):
    dry_run = serializers.BooleanField(default=False)


class SweepResultSerializer(serializers.Serializer):
    today = serializers.DateField()
    changed = serializers.BooleanField()
    promoted = serializers.ListField(child=serializers.DictField())
    failed = serializers.ListField(child=serializers.CharField())
