"""Emergency resource lookup.

The engine only depends on the ResourceLookup protocol. InMemoryResourceStore
is the bundled implementation, seeded with the hotlines the app ships with.
"""
import logging
from typing import Iterable, List, Optional, Protocol, Tuple

from nafsy.shared.models import Language, Resource

logger = logging.getLogger(__name__)


class ResourceLookup(Protocol):
    """Anything that can list emergency resources for a language and country."""

    def get_emergency_resources(
        self,
        language: Language,
        country: Optional[str] = None,
        limit: int = 5,
    ) -> List[Resource]:
        ...


SEED_RESOURCES: Tuple[Resource, ...] = (
    Resource(
        title="الخط الوطني للوقاية من الانتحار",
        description="خط دعم الأزمات على مدار الساعة للمساعدة الفورية",
        resource_type="hotline",
        language="ar",
        country="SA",
        phone="920033360",
        is_emergency=True,
    ),
    Resource(
        title="خط دعم الصحة النفسية",
        description="استشارات ودعم مهني للصحة النفسية",
        resource_type="hotline",
        language="ar",
        country="SA",
        phone="920033360",
        is_emergency=False,
    ),
    Resource(
        title="طوارئ أقرب مستشفى",
        description="توجه إلى قسم الطوارئ في أقرب مستشفى",
        resource_type="emergency",
        language="ar",
        country="SA",
        phone="997",
        is_emergency=True,
    ),
    Resource(
        title="Crisis Text Line",
        description="Free, 24/7 support for those in crisis. Text HOME to 741741",
        resource_type="hotline",
        language="en",
        url="https://www.crisistextline.org",
        is_emergency=True,
    ),
    Resource(
        title="Mental Health Resources",
        description="Comprehensive mental health information and tools",
        resource_type="article",
        language="en",
        url="https://www.mentalhealth.gov",
        is_emergency=False,
    ),
)


class InMemoryResourceStore:
    """Resource store held in process memory."""

    def __init__(self, resources: Optional[Iterable[Resource]] = None):
        self._resources: List[Resource] = list(
            SEED_RESOURCES if resources is None else resources
        )
        logger.info(
            "RESOURCE_STORE_INITIALIZED",
            extra={"resource_count": len(self._resources)}
        )

    def add(self, resource: Resource) -> None:
        self._resources.append(resource)

    def get_emergency_resources(
        self,
        language: Language,
        country: Optional[str] = None,
        limit: int = 5,
    ) -> List[Resource]:
        """Emergency resources in a language.

        With a country, keeps resources for that country plus global ones
        (no country set). Store order is preserved.
        """
        code = language.value if isinstance(language, Language) else str(language)
        matches = [
            r for r in self._resources
            if r.is_emergency and r.language == code
        ]
        if country:
            wanted = country.upper()
            matches = [
                r for r in matches
                if r.country is None or r.country.upper() == wanted
            ]
        return matches[:max(limit, 0)]
