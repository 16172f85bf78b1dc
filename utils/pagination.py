import math


def paginate(query, page: int = 1, page_size: int = 20) -> dict:
    page = max(int(page or 1), 1)
    page_size = max(int(page_size or 20), 1)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }


def paginate_list(rows: list, page: int = 1, page_size: int = 20) -> dict:
    page = max(int(page or 1), 1)
    page_size = max(int(page_size or 20), 1)
    total = len(rows)
    start = (page - 1) * page_size
    return {
        "items": rows[start : start + page_size],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }
