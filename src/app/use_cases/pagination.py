from typing import Tuple

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def clamp_page(page: int, page_size: int) -> Tuple[int, int, int]:
    """
    Normalize paging input

    Returns:
        (page >= 1, page_size in [1, MAX_PAGE_SIZE], offset)
    """
    page = max(1, page or 1)
    page_size = min(MAX_PAGE_SIZE, max(1, page_size or DEFAULT_PAGE_SIZE))
    return page, page_size, (page - 1) * page_size
