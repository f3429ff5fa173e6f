# mc_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 200


def paginated_response(request, items, serializer_class, *, view=None, context=None) -> Response:
    """
    List endpoints return { count, next, previous, results }.
    `items` may be a queryset or an already-ordered list (e.g. classified appointments).
    """
    p = DefaultPagination()
    page = p.paginate_queryset(items, request, view=view)
    ctx = context or {"request": request}
    if page is not None:
        return p.get_paginated_response(serializer_class(page, many=True, context=ctx).data)

    return Response(serializer_class(items, many=True, context=ctx).data)
