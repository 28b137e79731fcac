"""
API views for the roster and the promotion workflow
"""
from django.core.exceptions import ValidationError
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from roster_management.apps.members.application.services import (
    PromotionApplicationService,
    RosterApplicationService,
)
from roster_management.apps.members.domain.ranks import rank_display, rank_weight
from roster_management.apps.members.infrastructure.clock import SystemClock
from roster_management.apps.members.models import CustomField, Member

from .serializers import (
    BoardSelectionSerializer,
    BtzSelectionSerializer,
    CustomFieldSerializer,
    MemberSerializer,
    MoveSerializer,
    ProcessPromotionsSerializer,
    PromoteSerializer,
    SupervisorSerializer,
    SweepResultSerializer,
)


def _error_response(error: ValidationError) -> Response:
    return Response({'error': ' '.join(error.messages)}, status=status.HTTP_400_BAD_REQUEST)


class MemberViewSet(viewsets.ModelViewSet):
    """
    ViewSet for roster members

    Endpoints:
    - GET /members/ - Roster, most senior first (``?team=`` filters one team)
    - GET /members/{row_id}/ - Member with eligibility verdict
    - POST /members/ - Add a member
    - PUT/PATCH /members/{row_id}/ - Edit a member
    - DELETE /members/{row_id}/ - Remove a member who supervises nobody
    - POST /members/{row_id}/promote/ - Manual promotion to the next rank
    - POST /members/{row_id}/btz_selection/ - Record the BTZ board outcome
    - POST /members/{row_id}/board_selection/ - Record the promotion board outcome
    - POST /members/{row_id}/move/ - Move to another team
    - POST /members/{row_id}/supervisor/ - Assign or clear the supervisor
    - GET /members/supervision_chart/ - Supervision tree
    - GET /members/supervisor_options/ - Members who can supervise
    - POST /members/process_promotions/ - Run the daily promotion sweep now
    """
    queryset = Member.objects.all()
    serializer_class = MemberSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = 'row_id'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.clock = SystemClock()
        self.promotion_service = PromotionApplicationService(clock=self.clock)
        self.roster_service = RosterApplicationService(clock=self.clock)

    def get_queryset(self):
        qs = super().get_queryset().select_related('supervisor')
        team = self.request.query_params.get('team')
        if team:
            qs = qs.filter(team=team)
        return qs

    def get_serializer_class(self):
        if self.action == 'promote':
            return PromoteSerializer
        elif self.action == 'btz_selection':
            return BtzSelectionSerializer
        elif self.action == 'board_selection':
            return BoardSelectionSerializer
        elif self.action == 'move':
            return MoveSerializer
        elif self.action == 'supervisor':
            return SupervisorSerializer
        elif self.action == 'process_promotions':
            return ProcessPromotionsSerializer
        return super().get_serializer_class()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['today'] = self.clock.today()
        return context

    def _member_response(self, row_id: str) -> Response:
        member = Member.objects.select_related('supervisor').get(row_id=row_id)
        return Response(MemberSerializer(member, context=self.get_serializer_context()).data)

    def list(self, request, *args, **kwargs):
        members = sorted(
            self.filter_queryset(self.get_queryset()),
            key=lambda m: (-rank_weight(m.rank), m.last_name),
        )
        serializer = MemberSerializer(members, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    def destroy(self, request, *args, **kwargs):
        member = self.get_object()
        try:
            self.roster_service.delete_member(member.row_id)
        except ValidationError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=PromoteSerializer, responses={200: MemberSerializer})
    @action(detail=True, methods=['post'])
    def promote(self, request, row_id=None):
        """
        Promote to the next enlisted rank

        Body: {
            "new_dor": "2025-06-01"
        }
        """
        member = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.promotion_service.promote(member.row_id, serializer.validated_data['new_dor'])
        except ValidationError as e:
            return _error_response(e)
        return self._member_response(member.row_id)

    @extend_schema(request=BtzSelectionSerializer, responses={200: MemberSerializer})
    @action(detail=True, methods=['post'])
    def btz_selection(self, request, row_id=None):
        """
        Record the below-the-zone outcome for an A1C

        Body: {
            "selected": true,
            "new_dor": "2025-04-01" (optional, defaults to the BTZ date)
        }
        """
        member = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.promotion_service.record_btz_selection(
                member.row_id,
                selected=serializer.validated_data['selected'],
                new_dor=serializer.validated_data.get('new_dor'),
            )
        except ValidationError as e:
            return _error_response(e)
        return self._member_response(member.row_id)

    @extend_schema(request=BoardSelectionSerializer, responses={200: MemberSerializer})
    @action(detail=True, methods=['post'])
    def board_selection(self, request, row_id=None):
        """
        Record the promotion board outcome for SrA through SMSgt

        Body: {
            "selected": true,
            "promotion_date": "2025-09-01"
        }
        """
        member = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.promotion_service.record_board_selection(
                member.row_id,
                selected=serializer.validated_data['selected'],
                promotion_date=serializer.validated_data.get('promotion_date'),
            )
        except ValidationError as e:
            return _error_response(e)
        return self._member_response(member.row_id)

    @extend_schema(request=MoveSerializer, responses={200: MemberSerializer})
    @action(detail=True, methods=['post'])
    def move(self, request, row_id=None):
        member = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.roster_service.move_member(member.row_id, serializer.validated_data['team'])
        except ValidationError as e:
            return _error_response(e)
        return self._member_response(member.row_id)

    @extend_schema(request=SupervisorSerializer, responses={200: MemberSerializer})
    @action(detail=True, methods=['post'])
    def supervisor(self, request, row_id=None):
        """
        Assign a supervisor

        Body: {
            "supervisor": "card-1a2b3c4d5e6f" (empty or null clears it)
        }
        """
        member = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.roster_service.assign_supervisor(member.row_id, serializer.validated_data.get('supervisor') or None)
        except ValidationError as e:
            return _error_response(e)
        return self._member_response(member.row_id)

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['get'])
    def supervision_chart(self, request):
        """Supervision chart as a list of root nodes with nested ``children``"""
        chart = self.roster_service.supervision_chart()
        return Response([node.as_dict() for node in chart])

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name='exclude',
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description='Row id of the member being edited',
            )
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=['get'])
    def supervisor_options(self, request):
        options = self.roster_service.supervisor_options(request.query_params.get('exclude'))
        return Response([
            {
                'row_id': m.row_id,
                'rank': m.rank,
                'rank_display': rank_display(m.rank),
                'last_name': m.last_name,
                'first_name': m.first_name,
            }
            for m in options
        ])

    @extend_schema(request=ProcessPromotionsSerializer, responses={200: SweepResultSerializer})
    @action(detail=False, methods=['post'])
    def process_promotions(self, request):
        """
        Run the promotion sweep for today

        Body: {
            "dry_run": false
        }
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.promotion_service.process_auto_promotions(dry_run=serializer.validated_data['dry_run'])
        output = SweepResultSerializer({
            'today': result.today,
            'changed': result.changed,
            'promoted': [
                {'row_id': m.row_id, 'name': str(m), 'rank': m.rank, 'dor_date': m.dor_date.isoformat()}
                for m in result.updated
            ],
            'failed': list(result.failed),
        })
        return Response(output.data)


class CustomFieldViewSet(viewsets.ModelViewSet):
    """ViewSet for the custom fields captured on every member"""
    queryset = CustomField.objects.all()
    serializer_class = CustomFieldSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = 'field_id'
