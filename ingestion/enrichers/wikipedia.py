"""
Wikipedia content enricher

Two phases per knowledge-base id:
1. Resolve the article title from the Wikidata sitelinks
2. Fetch the article body from the Wikipedia REST API and flatten it to text
"""

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote
import logging

from ingestion.base import HttpSource
from ingestion.transformers.html import strip_html
from ingestion.transformers.merger import normalize_wikidata_id
from schemas.poi import NarrativeContent, ResolvedTitle
from core.cache import EnrichmentCache, InMemoryCache
from core.config import settings
from core.exceptions import (
    ExtractionError,
    ContentEnrichmentError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

FALLBACK_LANGUAGES = ["en", "de", "es", "it"]
EXTRACT_LENGTH = 500


def language_order(preferred: str) -> List[str]:
    order: List[str] = []
    for lang in [preferred] + FALLBACK_LANGUAGES:
        if lang and lang not in order:
            order.append(lang)
    return order


def article_url(title: str, language: str) -> str:
    return f"https://{language}.wikipedia.org/wiki/{quote(title.replace(' ', '_'), safe='')}"


class WikipediaEnricher(HttpSource):
    """Resolve and fetch narrative source text for POIs."""

    service_name = "wikipedia"
    error_class = ContentEnrichmentError

    def __init__(
        self,
        rate_limiter,
        cache: EnrichmentCache[NarrativeContent],
        title_cache: Optional[EnrichmentCache[ResolvedTitle]] = None,
        entity_url: Optional[str] = None,
        rest_url_template: str = "https://{lang}.wikipedia.org/api/rest_v1",
        **kwargs
    ):
        super().__init__(rate_limiter, **kwargs)
        self.cache = cache
        self.title_cache = title_cache if title_cache is not None else InMemoryCache()
        self.entity_url = (entity_url or settings.WIKIDATA_ENTITY_URL).rstrip("/")
        self.rest_url_template = rest_url_template

    async def get_content(
        self,
        wikidata_id: str,
        preferred_lang: Optional[str] = None
    ) -> Optional[NarrativeContent]:
        """
        Narrative content for an id, or None when no article exists.

        Raises:
            ContentEnrichmentError: On any failure other than "not found"
        """
        qid = normalize_wikidata_id(wikidata_id)
        if not qid:
            return None
        lang = preferred_lang or settings.PREFERRED_LANGUAGE
        cache_key = f"{qid}:{lang}"

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            content = await self._lookup(qid, lang)
        except ExtractionError:
            raise
        except Exception as e:
            # Malformed entity or article payloads
            raise ContentEnrichmentError(
                f"Unexpected error during content lookup for {qid}",
                context={"wikidata_id": qid, "language": lang},
                original_exception=e
            )

        if content is None:
            return None
        self.cache.put(cache_key, content)
        return content

    async def _lookup(self, qid: str, lang: str) -> Optional[NarrativeContent]:
        async with self._client() as client:
            resolved = await self.resolve_title(client, qid, lang)
            if resolved is None and lang != "en":
                logger.debug(f"No sitelink for {qid} in {lang}, retrying with en")
                resolved = await self.resolve_title(client, qid, "en")
            if resolved is None:
                logger.debug(f"No Wikipedia article for {qid}")
                return None

            return await self.fetch_article(client, resolved.title, resolved.language)

    async def resolve_title(self, client, qid: str, preferred_lang: str) -> Optional[ResolvedTitle]:
        """Walk the sitelinks in language order and return the first article found."""
        cache_key = f"{qid}:{preferred_lang}"
        cached = self.title_cache.get(cache_key)
        if cached is not None:
            return cached

        url = f"{self.entity_url}/{qid}.json"
        try:
            response = await self._request(client, "GET", url)
        except ResourceNotFoundError:
            return None
        except ContentEnrichmentError:
            raise
        except ExtractionError as e:
            raise ContentEnrichmentError(
                f"Sitelink resolution failed for {qid}: {e.message}",
                context={"wikidata_id": qid, "language": preferred_lang, **e.context},
                original_exception=e
            )

        payload = self._decode_json(response)
        entities = payload.get("entities") if isinstance(payload, dict) else None
        if not entities:
            return None
        # Redirected ids come back under their target key
        entity = entities.get(qid) or next(iter(entities.values()))
        sitelinks: Dict[str, Any] = entity.get("sitelinks") or {}

        for lang in language_order(preferred_lang):
            link = sitelinks.get(f"{lang}wiki")
            if link and link.get("title"):
                resolved = ResolvedTitle(title=link["title"], language=lang)
                self.title_cache.put(cache_key, resolved)
                return resolved
        return None

    async def fetch_article(self, client, title: str, language: str) -> Optional[NarrativeContent]:
        """Full article text, falling back to the page summary."""
        base = self.rest_url_template.format(lang=language)
        encoded = quote(title.replace(" ", "_"), safe="")

        text = ""
        try:
            response = await self._request(client, "GET", f"{base}/page/mobile-sections/{encoded}")
            text = self._sections_text(self._decode_json(response))
        except ResourceNotFoundError:
            text = ""
        except ExtractionError as e:
            raise self._content_error(title, language, e)

        if not text:
            try:
                response = await self._request(client, "GET", f"{base}/page/summary/{encoded}")
                summary = self._decode_json(response)
            except ResourceNotFoundError:
                return None
            except ExtractionError as e:
                raise self._content_error(title, language, e)
            text = strip_html((summary or {}).get("extract") or "")

        if not text:
            return None

        return NarrativeContent(
            title=title,
            extract=text[:EXTRACT_LENGTH],
            content=text,
            url=article_url(title, language),
            language=language,
        )

    async def enrich_batch(
        self,
        ids: List[str],
        preferred_lang: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> Dict[str, NarrativeContent]:
        """
        Fetch content for each id sequentially.

        Ids that fail or have no article are absent from the result.
        """
        results: Dict[str, NarrativeContent] = {}
        total = len(ids)

        for index, wikidata_id in enumerate(ids, start=1):
            qid = normalize_wikidata_id(wikidata_id)
            try:
                content = await self.get_content(wikidata_id, preferred_lang)
                if content is not None and qid:
                    results[qid] = content
            except ExtractionError as e:
                logger.warning(f"Wikipedia enrichment failed for {wikidata_id}: {e}")

            if on_progress:
                on_progress(index, total)

        logger.info(f"Wikipedia: enriched {len(results)}/{total}")
        return results

    @staticmethod
    def _sections_text(payload: Any) -> str:
        if not isinstance(payload, dict):
            return ""
        parts: List[str] = []
        for section in (payload.get("lead") or {}).get("sections") or []:
            if section.get("text"):
                parts.append(section["text"])
        for section in (payload.get("remaining") or {}).get("sections") or []:
            if section.get("line"):
                parts.append(f"<h2>{section['line']}</h2>")
            if section.get("text"):
                parts.append(section["text"])
        return strip_html("\n".join(parts))

    @staticmethod
    def _content_error(title: str, language: str, e: ExtractionError) -> ContentEnrichmentError:
        if isinstance(e, ContentEnrichmentError):
            return e
        return ContentEnrichmentError(
            f"Article fetch failed for {title}: {e.message}",
            context={"title": title, "language": language, **e.context},
            original_exception=e
        )
