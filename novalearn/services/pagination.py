from novalearn.core import config


def page_window(page: int | None, limit: int | None) -> tuple[int, int, int]:
    """Clamp page/limit to sane bounds and return (page, limit, offset)."""
    page = max(1, page or 1)
    limit = limit or config.DEFAULT_PAGE_SIZE
    limit = max(1, min(limit, config.MAX_PAGE_SIZE))
    return page, limit, (page - 1) * limit
