from rest_framework import viewsets, mixins, status, serializers as drf_serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema
from .serializers import (
    LogEntrySerializer,
    BundleSerializer,
    BundleListSerializer,
    BalanceSerializer,
    DashboardSummarySerializer,
    # Input serializers
    LogEntryInputSerializer,
    BundleSubmitInputSerializer,
    BundleStatusInputSerializer,
    LogEntryFilterSerializer,
    BundleFilterSerializer,
)
from .services import (
    create_log,
    update_log,
    delete_log,
    get_user_logs,
    submit_bundle,
    delete_bundle,
    get_bundle_for_user,
    get_user_bundles,
    set_bundle_status,
    toggle_bundle_paid,
    get_balance,
    get_dashboard_summary,
    LogEntryNotFoundError,
    LogEntryLockedError,
    BundleNotFoundError,
    InvalidBundleStatusError,
)
from .exceptions import (
    LogEntryNotFound,
    LogEntryLocked,
    BundleNotFound,
    InvalidBundleStatus,
)
from .permissions import IsEntityOwner, IsUnlockedLogEntry


UUID_LOOKUP_REGEX = r'[0-9a-fA-F-]{36}'


# Response serializers for API documentation
class BundleSubmitResponseSerializer(drf_serializers.Serializer):
    bundle = BundleSerializer(allow_null=True)
    detail = drf_serializers.CharField()
    balance = BalanceSerializer()


class LogbookPagination(PageNumberPagination):
    """Custom pagination for logbook lists."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class LogEntryViewSet(viewsets.ModelViewSet):
    """
    ViewSet for LogEntry CRUD operations.

    list: Get the current user's entries (filterable by bundled/bundle)
    create: Log hours (timed or manual)
    retrieve: Get a specific entry
    update: Replace an unbundled entry's times
    partial_update: Change an unbundled entry's note and/or times
    destroy: Delete an unbundled entry
    """

    serializer_class = LogEntrySerializer
    permission_classes = [IsAuthenticated, IsEntityOwner]
    pagination_class = LogbookPagination
    lookup_value_regex = UUID_LOOKUP_REGEX

    def get_permissions(self):
        """Bundled entries are read-only."""
        if self.action in ['update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsEntityOwner(), IsUnlockedLogEntry()]
        return super().get_permissions()

    def get_queryset(self):
        """Scope to the current user, filtered by validated query params."""
        if getattr(self, 'swagger_fake_view', False):
            return get_user_logs(user=None).none()

        filter_serializer = LogEntryFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return get_user_logs(
            user=self.request.user,
            bundled=params.get('bundled'),
            bundle_id=params.get('bundle'),
        )

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return LogEntryInputSerializer
        return LogEntrySerializer

    @extend_schema(request=LogEntryInputSerializer, responses={201: LogEntrySerializer})
    def create(self, request, *args, **kwargs):
        input_serializer = LogEntryInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        entry = create_log(
            user=request.user,
            times=input_serializer.to_log_times(),
            note=input_serializer.validated_data.get('note', ''),
        )
        return Response(LogEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=LogEntryInputSerializer, responses={200: LogEntrySerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        entry = self.get_object()

        input_serializer = LogEntryInputSerializer(data=request.data, partial=partial)
        input_serializer.is_valid(raise_exception=True)

        try:
            entry = update_log(
                user=request.user,
                log_id=entry.id,
                times=input_serializer.to_log_times(),
                note=input_serializer.validated_data.get('note'),
            )
        except LogEntryNotFoundError:
            raise LogEntryNotFound()
        except LogEntryLockedError:
            raise LogEntryLocked()

        return Response(LogEntrySerializer(entry).data)

    def destroy(self, request, *args, **kwargs):
        entry = self.get_object()
        try:
            delete_log(user=request.user, log_id=entry.id)
        except LogEntryNotFoundError:
            raise LogEntryNotFound()
        except LogEntryLockedError:
            raise LogEntryLocked()
        return Response(status=status.HTTP_204_NO_CONTENT)


class BundleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for RMP bundles.

    list: Get the current user's bundles (filterable by status)
    create: File an RMP from the oldest 3.0 unbundled hours
    retrieve: Get a bundle with its entries
    destroy: Unsubmit a bundle, releasing and re-merging its entries
    """

    serializer_class = BundleSerializer
    permission_classes = [IsAuthenticated, IsEntityOwner]
    pagination_class = LogbookPagination
    lookup_value_regex = UUID_LOOKUP_REGEX

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return get_user_bundles(user=None).none()

        filter_serializer = BundleFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        return get_user_bundles(
            user=self.request.user,
            status=filter_serializer.validated_data.get('status'),
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return BundleListSerializer
        return BundleSerializer

    @extend_schema(
        request=BundleSubmitInputSerializer,
        responses={201: BundleSerializer, 200: BundleSubmitResponseSerializer},
        description="Bundle the oldest 3.0 unbundled hours into an RMP. "
                    "Does nothing (200, bundle=null) below 3.0 hours.",
    )
    def create(self, request, *args, **kwargs):
        input_serializer = BundleSubmitInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        bundle = submit_bundle(
            user=request.user,
            filed_date=input_serializer.validated_data['filed_date'],
        )

        if bundle is None:
            return Response({
                'bundle': None,
                'detail': 'Not enough unbundled hours to file an RMP.',
                'balance': BalanceSerializer(get_balance(user=request.user)).data,
            })

        bundle = get_bundle_for_user(user=request.user, bundle_id=bundle.id)
        return Response(BundleSerializer(bundle).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        bundle = self.get_object()
        try:
            delete_bundle(user=request.user, bundle_id=bundle.id)
        except BundleNotFoundError:
            raise BundleNotFound()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=BundleStatusInputSerializer, responses={200: BundleSerializer})
    @action(detail=True, methods=['post'], url_path='status', url_name='status')
    def update_status(self, request, pk=None):
        """
        Set the payment status of a bundle.

        POST /api/bundles/{id}/status/
        Body: {"status": "paid"}
        """
        bundle = self.get_object()

        input_serializer = BundleStatusInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            bundle = set_bundle_status(
                user=request.user,
                bundle_id=bundle.id,
                status=input_serializer.validated_data['status'],
            )
        except BundleNotFoundError:
            raise BundleNotFound()
        except InvalidBundleStatusError:
            raise InvalidBundleStatus()

        return Response(BundleSerializer(bundle).data)

    @extend_schema(request=None, responses={200: BundleSerializer})
    @action(detail=True, methods=['post'])
    def toggle_paid(self, request, pk=None):
        """
        Flip a bundle between submitted and paid.

        POST /api/bundles/{id}/toggle_paid/
        """
        bundle = self.get_object()
        try:
            bundle = toggle_bundle_paid(user=request.user, bundle_id=bundle.id)
        except BundleNotFoundError:
            raise BundleNotFound()
        return Response(BundleSerializer(bundle).data)


@extend_schema(
    responses={200: BalanceSerializer},
    description="Unbundled hours and the number of RMPs they would make.",
    tags=['logbook'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def logbook_balance(request):
    """Get the current user's unbundled balance."""
    return Response(BalanceSerializer(get_balance(user=request.user)).data)


@extend_schema(
    responses={200: DashboardSummarySerializer},
    description="Balance plus pending/paid RMP counts for the dashboard.",
    tags=['logbook'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_summary(request):
    """Get the current user's dashboard summary."""
    summary = get_dashboard_summary(user=request.user)
    return Response(DashboardSummarySerializer(summary).data)
