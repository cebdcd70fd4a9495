"""
Pagination Tests
"""

from core.pagination import page_payload, paginate


class TestPaginate:

    def test_windows_partition_items(self):
        items = list(range(13))
        pages = [paginate(items, n, 6) for n in (1, 2, 3)]

        assert [list(p.object_list) for p in pages] == [items[0:6], items[6:12], items[12:13]]

    def test_navigation_flags(self):
        first = paginate(range(12), 1, 6)
        last = paginate(range(12), 2, 6)

        assert first.has_previous() is False
        assert first.has_next() is True
        assert last.has_previous() is True
        # next disabled once the window end reaches the count
        assert last.has_next() is False
        assert last.paginator.num_pages == 2

    def test_empty_list(self):
        page = paginate([], 1, 10)
        assert list(page.object_list) == []
        assert page.has_next() is False
        assert page.paginator.num_pages == 1

    def test_page_beyond_end_clamps_to_last(self):
        page = paginate(range(13), 5, 6)
        assert page.number == 3
        assert list(page.object_list) == [12]

    def test_not_an_integer_falls_back_to_first(self):
        assert paginate(range(13), 'abc', 6).number == 1
        assert paginate(range(13), None, 6).number == 1

    def test_below_one_falls_back_to_first(self):
        assert paginate(range(13), '-4', 6).number == 1
        assert paginate(range(13), 0, 6).number == 1

    def test_numeric_string(self):
        assert paginate(range(13), '2', 6).number == 2


class TestPagePayload:

    def test_payload(self):
        data = page_payload(paginate(['a', 'b', 'c'], 1, 2), str.upper)
        assert data == {
            'results': ['A', 'B'],
            'page': 1,
            'page_size': 2,
            'count': 3,
            'num_pages': 2,
            'has_next': True,
            'has_previous': False,
        }
