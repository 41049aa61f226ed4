from supabase import Client
from app.modules.activity_logs.service import ActivityLogService
from app.modules.search.schemas import SearchResult
from typing import Any, Callable, Dict, List, Optional
import logging
import re

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
PER_SOURCE_LIMIT = 10
MAX_RESULTS = 20

# characters with meaning inside a PostgREST or=() filter
_FILTER_CHARS = re.compile(r"[,()%*]")


def calculate_relevance(search_term: str, content: str) -> float:
    """100 minus the match position for a substring hit, else the fraction of matching words times 50."""
    content_lower = content.lower()
    search_lower = search_term.lower()

    index = content_lower.find(search_lower)
    if index >= 0:
        return 100 - index

    words = search_lower.split(" ")
    matches = sum(1 for word in words if word in content_lower)
    return matches / len(words) * 50


def _text(*values: Optional[str]) -> str:
    return " ".join(v or "" for v in values)


class SearchSource:
    def __init__(
        self,
        table: str,
        columns: str,
        search_fields: List[str],
        to_result: Callable[[Dict[str, Any], str], SearchResult],
    ):
        self.table = table
        self.columns = columns
        self.search_fields = search_fields
        self.to_result = to_result


SEARCH_SOURCES = [
    SearchSource(
        "vba_projects",
        "id, project_name, project_number, address, status",
        ["project_name", "address", "project_number"],
        lambda row, term: SearchResult(
            id=f"vba-{row['id']}",
            type="inspection",
            title=row.get("project_name") or "",
            description=f"{row.get('address') or ''} • {row.get('status') or ''}",
            url=f"/vba/project/{row['id']}",
            relevance=calculate_relevance(term, _text(row.get("project_name"), row.get("address"))),
        ),
    ),
    SearchSource(
        "projects",
        "id, project_name, permit_number, address, status",
        ["project_name", "address", "permit_number"],
        lambda row, term: SearchResult(
            id=f"project-{row['id']}",
            type="project",
            title=row.get("project_name") or "",
            description=f"{row.get('address') or ''} • {row.get('status') or ''}",
            url=f"/projects/{row['id']}",
            relevance=calculate_relevance(term, _text(row.get("project_name"), row.get("address"))),
        ),
    ),
    SearchSource(
        "documents",
        "id, name, category, project_id",
        ["name"],
        lambda row, term: SearchResult(
            id=f"document-{row['id']}",
            type="document",
            title=row.get("name") or "",
            description=f"{row.get('category') or 'document'} • {row.get('project_id') or 'general'}",
            url=f"/documents/{row['id']}",
            relevance=calculate_relevance(term, row.get("name") or ""),
        ),
    ),
    SearchSource(
        "submittals",
        "id, title, permit_number, status, project_name",
        ["title", "permit_number", "project_name"],
        lambda row, term: SearchResult(
            id=f"submittal-{row['id']}",
            type="submittal",
            title=row.get("title") or "",
            description=f"{row.get('project_name') or ''} • {row.get('status') or ''}",
            url=f"/submittals/{row['id']}",
            relevance=calculate_relevance(term, _text(row.get("title"), row.get("project_name"))),
        ),
    ),
    SearchSource(
        "contacts",
        "id, name, email, company, role",
        ["name", "email", "company"],
        lambda row, term: SearchResult(
            id=f"contact-{row['id']}",
            type="contact",
            title=row.get("name") or "",
            description=f"{row.get('company') or row.get('email') or ''} • {row.get('role') or 'Contact'}",
            url=f"/members#contact-{row['id']}",
            relevance=calculate_relevance(term, _text(row.get("name"), row.get("company"))),
        ),
    ),
]


class SearchService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityLogService(supabase)

    def _search_source(self, source: SearchSource, term: str) -> List[SearchResult]:
        pattern = f"%{_FILTER_CHARS.sub(' ', term)}%"
        query = self.supabase.table(source.table).select(source.columns)
        if len(source.search_fields) == 1:
            query = query.ilike(source.search_fields[0], pattern)
        else:
            query = query.or_(",".join(f"{field}.ilike.{pattern}" for field in source.search_fields))
        result = query.limit(PER_SOURCE_LIMIT).execute()
        return [source.to_result(row, term) for row in result.data or []]

    def search(self, query: Optional[str], user_id: Optional[str] = None) -> List[SearchResult]:
        """Search every source; a failing source is logged and skipped"""
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        term = query.strip().lower()
        results: List[SearchResult] = []
        for source in SEARCH_SOURCES:
            try:
                results.extend(self._search_source(source, term))
            except Exception as e:
                logger.error(f"{source.table} search error: {e}")

        top = sorted(results, key=lambda r: r.relevance, reverse=True)[:MAX_RESULTS]
        self.activity.log(
            "global_search",
            user_id=user_id,
            metadata={"query": term, "results_count": len(top)},
        )
        return top
