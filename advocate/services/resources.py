"""Static catalogue of legal resources and research tools."""

from typing import Any, Dict, List, NamedTuple, Optional, Tuple
import math


class Resource(NamedTuple):
    id: str
    title: str
    type: str
    category: str
    description: str
    url: str
    jurisdiction: str
    relevanceScore: float
    lastUpdated: str


RESOURCES: List[Resource] = [
    Resource('1', 'Contract Law Fundamentals', 'guide', 'contract',
             'Comprehensive guide to understanding contract law basics',
             'https://example.com/contract-law-guide', 'federal', 0.95,
             '2024-01-15'),
    Resource('2', 'Employment Rights Handbook', 'handbook', 'employment',
             'Complete handbook on employee rights and employer obligations',
             'https://example.com/employment-handbook', 'federal', 0.88,
             '2024-02-01'),
    Resource('3', 'Family Court Procedures', 'procedure', 'family',
             'Step-by-step guide to family court procedures and requirements',
             'https://example.com/family-court-procedures', 'state', 0.92,
             '2024-01-20'),
    Resource('4', 'Criminal Defense Strategies', 'strategy', 'criminal',
             'Advanced strategies for criminal defense cases',
             'https://example.com/criminal-defense', 'federal', 0.87,
             '2024-01-10'),
    Resource('5', 'Real Estate Transaction Guide', 'guide', 'real-estate',
             'Complete guide to real estate transactions and documentation',
             'https://example.com/real-estate-guide', 'state', 0.90,
             '2024-02-05'),
]

TYPES = ('guide', 'handbook', 'procedure', 'strategy', 'template', 'statute',
         'case-law')
JURISDICTIONS = ('federal', 'state', 'local')

CASE_TYPE_CATEGORIES = {
    'civil': ('contract', 'civil'),
    'criminal': ('criminal',),
    'family': ('family',),
    'employment': ('employment',),
    'real-estate': ('real-estate',),
    'corporate': ('contract', 'corporate'),
    'personal-injury': ('civil', 'personal-injury'),
}
"""Resource categories relevant to each case type; others get ``general``."""

RESEARCH_TOOLS = [
    {
        'id': 'case-law-search',
        'name': 'Case Law Search',
        'description': 'Search through extensive case law databases',
        'category': 'research',
        'url': '/tools/case-law-search',
        'features': ['Advanced search filters', 'Citation analysis',
                     'Related cases'],
    },
    {
        'id': 'statute-finder',
        'name': 'Statute Finder',
        'description': 'Find relevant statutes and regulations',
        'category': 'research',
        'url': '/tools/statute-finder',
        'features': ['Multi-jurisdiction search', 'Recent updates',
                     'Cross-references'],
    },
    {
        'id': 'legal-forms',
        'name': 'Legal Forms Library',
        'description': 'Access templates and legal forms',
        'category': 'documents',
        'url': '/tools/legal-forms',
        'features': ['Customizable templates', 'State-specific forms',
                     'Auto-fill options'],
    },
    {
        'id': 'citation-checker',
        'name': 'Citation Checker',
        'description': 'Verify and format legal citations',
        'category': 'tools',
        'url': '/tools/citation-checker',
        'features': ['Multiple citation formats', 'Accuracy verification',
                     'Batch processing'],
    },
]


def search(q: Optional[str] = None, category: Optional[str] = None,
           type: Optional[str] = None, jurisdiction: Optional[str] = None,
           page: int = 1, limit: int = 10, sort_by: str = 'relevanceScore',
           sort_order: str = 'desc'
           ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Filter, sort and paginate the catalogue."""
    found = list(RESOURCES)
    if q:
        term = q.lower()
        found = [r for r in found if term in r.title.lower()
                 or term in r.description.lower()
                 or term in r.category.lower()]
    if category:
        found = [r for r in found if r.category == category]
    if type:
        found = [r for r in found if r.type == type]
    if jurisdiction:
        found = [r for r in found if r.jurisdiction == jurisdiction]
    if sort_by not in Resource._fields:
        sort_by = 'relevanceScore'
    found.sort(key=lambda r: getattr(r, sort_by),
               reverse=sort_order == 'desc')

    start = (page - 1) * limit
    selected = [r._asdict() for r in found[start:start + limit]]
    return selected, {
        'current': page,
        'total': int(math.ceil(len(found) / limit)),
        'count': len(selected),
        'totalRecords': len(found)
    }


def categories() -> Dict[str, List[str]]:
    """Distinct categories, types and jurisdictions, in catalogue order."""
    def distinct(field: str) -> List[str]:
        return list(dict.fromkeys(getattr(r, field) for r in RESOURCES))
    return {'categories': distinct('category'), 'types': distinct('type'),
            'jurisdictions': distinct('jurisdiction')}


def recommend(case_type: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Most relevant resources for a type of case."""
    relevant = CASE_TYPE_CATEGORIES.get(case_type, ('general',))
    found = sorted((r for r in RESOURCES if r.category in relevant),
                   key=lambda r: r.relevanceScore, reverse=True)
    return [r._asdict() for r in found[:limit]]


def research_tools() -> List[Dict[str, Any]]:
    return [dict(tool) for tool in RESEARCH_TOOLS]
