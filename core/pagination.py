"""
Pagination over in-memory lists.

Moderation tables hold the whole (filtered) list locally and show fixed-size
windows of it through Django's ``Paginator``. Unparseable page numbers fall
back to the first page and out-of-range ones to the nearest existing page.
"""

from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator


def paginate(items, page, size):
    """Return the Django ``Page`` of ``items`` for the 1-based ``page``."""
    paginator = Paginator(list(items), size)
    try:
        return paginator.page(page)
    except PageNotAnInteger:
        return paginator.page(1)
    except EmptyPage:
        if int(page) < 1:
            return paginator.page(1)
        return paginator.page(paginator.num_pages)


def page_payload(page, serialize=None):
    """JSON body for one page, shared by the REST listings and the users socket."""
    serialize = serialize or (lambda item: item)
    return {
        'results': [serialize(item) for item in page.object_list],
        'page': page.number,
        'page_size': page.paginator.per_page,
        'count': page.paginator.count,
        'num_pages': page.paginator.num_pages,
        'has_next': page.has_next(),
        'has_previous': page.has_previous(),
    }
