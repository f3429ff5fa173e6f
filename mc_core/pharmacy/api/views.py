# mc_core/pharmacy/api/views.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from mc_core.accounts.api.serializers import AccountSerializer
from mc_core.accounts.models import AccountRole
from mc_core.accounts.permissions import RolePermission, role_of
from mc_core.accounts.selectors import list_accounts
from mc_core.common.api.pagination import paginated_response
from mc_core.common.lookups import get_record
from mc_core.pharmacy import selectors
from mc_core.pharmacy.api.serializers import (
    MedicineSerializer,
    MedicineWriteSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderTransitionSerializer,
)
from mc_core.pharmacy.models import Medicine, Order
from mc_core.pharmacy.services import InventoryService, OrderService


class MedicineViewSet(viewsets.ViewSet):
    """
    A pharmacy's own inventory.
    """
    permission_classes = [IsAuthenticated, RolePermission]
    role_rules = {"*": {AccountRole.PHARMACY}}

    serializer_class = MedicineSerializer
    queryset = Medicine.objects.none()

    @extend_schema(
        tags=["Pharmacy"],
        parameters=[
            OpenApiParameter(name="search", location=OpenApiParameter.QUERY, required=False, type=str),
            OpenApiParameter(name="category", location=OpenApiParameter.QUERY, required=False, type=str),
        ],
    )
    def list(self, request):
        qs = selectors.inventory_for(pharmacy_id=request.user.id, params=request.query_params)
        return paginated_response(request, qs, MedicineSerializer, view=self)

    def retrieve(self, request, pk=None):
        med = get_record(selectors.inventory_for(pharmacy_id=request.user.id), message="Medicine not found.", id=pk)
        return Response(MedicineSerializer(med).data)

    @extend_schema(request=MedicineWriteSerializer, responses={201: MedicineSerializer}, tags=["Pharmacy"])
    def create(self, request):
        ser = MedicineWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        med = InventoryService.create_medicine(pharmacy=request.user, **ser.validated_data)
        return Response(MedicineSerializer(med).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=MedicineWriteSerializer, responses={200: MedicineSerializer}, tags=["Pharmacy"])
    def partial_update(self, request, pk=None):
        ser = MedicineWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        med = InventoryService.update_medicine(pharmacy=request.user, medicine_id=pk, fields=ser.validated_data)
        return Response(MedicineSerializer(med).data)

    def destroy(self, request, pk=None):
        InventoryService.delete_medicine(pharmacy=request.user, medicine_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(methods=["GET"], detail=False, url_path="low-stock")
    def low_stock(self, request):
        qs = selectors.low_stock_for(pharmacy_id=request.user.id)
        return Response(MedicineSerializer(qs, many=True).data)

    @action(methods=["GET"], detail=False)
    def categories(self, request):
        return Response({"categories": selectors.categories_for(pharmacy_id=request.user.id)})


class PharmacyViewSet(viewsets.ViewSet):
    """
    Patients browse pharmacies and their catalogs.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer
    queryset = Medicine.objects.none()

    def list(self, request):
        qs = list_accounts(role=AccountRole.PHARMACY).order_by("display_name")
        return paginated_response(request, qs, AccountSerializer, view=self)

    @extend_schema(responses={200: MedicineSerializer(many=True)}, tags=["Pharmacy"])
    @action(methods=["GET"], detail=True)
    def catalog(self, request, pk=None):
        pharmacy = get_record(list_accounts(role=AccountRole.PHARMACY), message="Pharmacy not found.", user_id=pk)
        qs = selectors.catalog_for_patients(pharmacy_id=pharmacy.user_id, params=request.query_params)
        return paginated_response(request, qs, MedicineSerializer, view=self)


class OrderViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - patients place and read their orders
    - pharmacies read incoming orders and move them through the status table
    """
    permission_classes = [IsAuthenticated, RolePermission]
    role_rules = {
        "list": {AccountRole.PATIENT, AccountRole.PHARMACY},
        "retrieve": {AccountRole.PATIENT, AccountRole.PHARMACY},
        "create": {AccountRole.PATIENT},
        "transition": {AccountRole.PHARMACY},
    }

    serializer_class = OrderSerializer
    queryset = Order.objects.none()

    def _visible(self, request, status_q=None):
        role = role_of(request.user)
        if role == AccountRole.PATIENT:
            return selectors.orders_for_patient(patient_id=request.user.id, status=status_q)
        if role == AccountRole.PHARMACY:
            return selectors.orders_for_pharmacy(pharmacy_id=request.user.id, status=status_q)
        return selectors.all_orders(status=status_q)

    @extend_schema(
        tags=["Orders"],
        parameters=[OpenApiParameter(name="status", location=OpenApiParameter.QUERY, required=False, type=str)],
    )
    def list(self, request):
        qs = self._visible(request, request.query_params.get("status"))
        return paginated_response(request, qs, OrderSerializer, view=self)

    def retrieve(self, request, pk=None):
        order = get_record(self._visible(request), message="Order not found.", id=pk)
        return Response(OrderSerializer(order).data)

    @extend_schema(request=OrderCreateSerializer, responses={201: OrderSerializer}, tags=["Orders"])
    def create(self, request):
        ser = OrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = OrderService.place_order(patient=request.user, **ser.validated_data)
        order = get_record(selectors.all_orders(), id=order.id)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OrderTransitionSerializer, responses={200: OrderSerializer}, tags=["Orders"])
    @action(methods=["POST"], detail=True)
    def transition(self, request, pk=None):
        ser = OrderTransitionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order, inventory = OrderService.transition(
            pharmacy=request.user, order_id=pk, to_status=ser.validated_data["status"]
        )
        order = get_record(selectors.all_orders(), id=order.id)
        return Response(
            {
                "order": OrderSerializer(order).data,
                "inventory": inventory.as_dict() if inventory else None,
            }
        )
