from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.core.paginator import Paginator

from ..conf import engine_setting


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    meta: Dict[str, int] = field(default_factory=dict)


def paginate(queryset, page: Optional[int] = None, limit: Optional[int] = None) -> Page:
    """
    Slice an ordered queryset into one page.

    ``limit`` falls back to ``DEFAULT_PAGE_SIZE`` and is capped at
    ``MAX_PAGE_SIZE``. Out-of-range pages return the last page.
    """
    size = limit or engine_setting("DEFAULT_PAGE_SIZE")
    size = max(1, min(int(size), engine_setting("MAX_PAGE_SIZE")))

    paginator = Paginator(queryset, size)
    page_obj = paginator.get_page(page or 1)
    return Page(
        items=list(page_obj.object_list),
        meta={
            "page": page_obj.number,
            "limit": size,
            "total": paginator.count,
            "total_pages": paginator.num_pages,
        },
    )
