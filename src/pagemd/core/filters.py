"""Multi-criteria page filtering"""

from pagemd.core.models import DateRange, FilterCriteria, PageProperties
from pagemd.core.utils.dates import parse_date


def _match_tags(page: PageProperties, tags: list[str] | None) -> bool:
    """Any overlap passes; criteria tags are not required to all be present."""
    if not tags:
        return True
    return bool(set(tags) & set(page.tags or []))


def _match_dates(page: PageProperties, date_range: DateRange | None) -> bool:
    """Inclusive bounds; a page without a parsable date is excluded once any bound is set."""
    if date_range is None:
        return True
    start, end = parse_date(date_range.start), parse_date(date_range.end)
    if start is None and end is None:
        return True
    page_date = parse_date(page.date)
    if page_date is None:
        return False
    if start and page_date < start:
        return False
    if end and page_date > end:
        return False
    return True


def _match_keyword(page: PageProperties, keyword: str | None) -> bool:
    if not keyword:
        return True
    needle = keyword.lower()
    return any(needle in (value or "").lower() for value in (page.title, page.summary, page.category))


def matches(page: PageProperties, criteria: FilterCriteria) -> bool:
    """True when page satisfies every present criterion."""
    if criteria.status and page.status != criteria.status:
        return False
    if criteria.type and page.type != criteria.type:
        return False
    if criteria.category and page.category != criteria.category:
        return False
    return (
        _match_tags(page, criteria.tags)
        and _match_dates(page, criteria.date_range)
        and _match_keyword(page, criteria.keyword)
    )


def filter_pages(pages: list[PageProperties], criteria: FilterCriteria | None) -> list[PageProperties]:
    """Return the pages matching criteria, in input order."""
    if criteria is None:
        return list(pages)
    return [p for p in pages if matches(p, criteria)]
