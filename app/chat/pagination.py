"""
Pagination classes for chat API.

Listings page with top/skip query parameters and answer with an
envelope carrying the total count:

    GET /api/v1/chat/channels/?top=20&skip=40

    {"count": 57, "top": 20, "skip": 40, "value": [...]}

The OData-style spellings $top and $skip are accepted as well.

Classes:
    TopSkipPagination: Default listings (top defaults to 10, max 100)
    PreviewPagination: Channel previews (an invalid or too large top
        falls back to 100)
"""

from __future__ import annotations

from rest_framework.pagination import BasePagination
from rest_framework.response import Response

from chat.constants import PAGINATION_CONFIG


def raw_param(request, names: tuple[str, ...]) -> str | None:
    """Value of the first query parameter in ``names`` that is present."""
    for name in names:
        raw = request.query_params.get(name)
        if raw is not None:
            return raw
    return None


def read_int(request, names: tuple[str, ...]) -> int | None:
    """The first present parameter in ``names`` as an int, None if invalid."""
    raw = raw_param(request, names)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


class TopSkipPagination(BasePagination):
    """
    Offset pagination with top/skip parameters.

    Query parameters:
        top: Page size (default 10, capped at 100)
        skip: Number of records to skip (default 0)
    """

    default_top = PAGINATION_CONFIG.DEFAULT_TOP
    max_top = PAGINATION_CONFIG.MAX_TOP
    top_query_params = ("top", "$top")
    skip_query_params = ("skip", "$skip")

    def get_top(self, request) -> int:
        top = read_int(request, self.top_query_params)
        if top is None or top < 1:
            return self.default_top
        return min(top, self.max_top)

    def get_skip(self, request) -> int:
        skip = read_int(request, self.skip_query_params)
        if skip is None or skip < 0:
            return 0
        return skip

    def paginate_queryset(self, queryset, request, view=None) -> list:
        self.top = self.get_top(request)
        self.skip = self.get_skip(request)
        self.count = queryset.count()
        return list(queryset[self.skip : self.skip + self.top])

    def get_paginated_response(self, data) -> Response:
        return Response(
            {
                "count": self.count,
                "top": self.top,
                "skip": self.skip,
                "value": data,
            }
        )

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "required": ["count", "top", "skip", "value"],
            "properties": {
                "count": {"type": "integer", "example": 57},
                "top": {"type": "integer", "example": self.default_top},
                "skip": {"type": "integer", "example": 0},
                "value": schema,
            },
        }


class PreviewPagination(TopSkipPagination):
    """Preview listing: an invalid or too large top means 100."""

    def get_top(self, request) -> int:
        if raw_param(request, self.top_query_params) is None:
            return self.default_top
        top = read_int(request, self.top_query_params)
        if top is None or top > self.max_top:
            return self.max_top
        if top < 1:
            return self.default_top
        return top
