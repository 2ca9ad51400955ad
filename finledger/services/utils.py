from fastapi import Query

MAX_PAGE_SIZE = 100


def page_params(
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    return {"limit": limit, "offset": offset}


def paginate(items: list, page: dict) -> list:
    return items[page["offset"]: page["offset"] + page["limit"]]
