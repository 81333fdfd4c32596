"""
Wikidata metadata enricher

Resolves description, image and Wikipedia article for knowledge-base ids
through batched SPARQL queries.
"""

from typing import Any, Callable, Dict, List, Optional
import logging

from ingestion.base import HttpSource
from ingestion.transformers.merger import normalize_wikidata_id
from schemas.poi import EnrichmentRecord
from core.cache import EnrichmentCache
from core.config import settings
from core.exceptions import ExtractionError, MetadataEnrichmentError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _binding_value(binding: Dict[str, Any], key: str) -> Optional[str]:
    cell = binding.get(key)
    if not isinstance(cell, dict):
        return None
    value = cell.get("value")
    return value if isinstance(value, str) else None


def build_sparql_query(ids: List[str], language: str) -> str:
    values = " ".join(f"wd:{qid}" for qid in ids)
    return f"""SELECT ?item ?description ?image ?article WHERE {{
  VALUES ?item {{ {values} }}
  OPTIONAL {{ ?item schema:description ?description . FILTER(LANG(?description) = "{language}") }}
  OPTIONAL {{ ?item wdt:P18 ?image . }}
  OPTIONAL {{
    ?article schema:about ?item ;
             schema:isPartOf <https://{language}.wikipedia.org/> .
  }}
}}"""


class WikidataEnricher(HttpSource):
    """
    Batch metadata lookups against the Wikidata SPARQL endpoint.

    Every requested id appears in the result, with null fields when
    Wikidata knows nothing about it or its batch failed.
    """

    service_name = "wikidata"
    error_class = MetadataEnrichmentError

    def __init__(
        self,
        rate_limiter,
        cache: EnrichmentCache[EnrichmentRecord],
        sparql_url: Optional[str] = None,
        batch_size: Optional[int] = None,
        language: Optional[str] = None,
        **kwargs
    ):
        super().__init__(rate_limiter, **kwargs)
        self.cache = cache
        self.sparql_url = sparql_url or settings.WIKIDATA_SPARQL_URL
        self.batch_size = batch_size or settings.WIKIDATA_BATCH_SIZE
        self.language = language or settings.PREFERRED_LANGUAGE

    async def enrich(self, wikidata_id: str) -> Optional[EnrichmentRecord]:
        results = await self.enrich_batch([wikidata_id])
        return results.get(normalize_wikidata_id(wikidata_id) or "")

    async def enrich_batch(
        self,
        ids: List[str],
        on_progress: Optional[ProgressCallback] = None
    ) -> Dict[str, EnrichmentRecord]:
        """
        Resolve metadata for a list of ids.

        Args:
            ids: Raw knowledge-base ids (normalized and de-duplicated here)
            on_progress: Called with (processed, total) after each batch

        Returns:
            Map normalized id -> EnrichmentRecord, one entry per unique id
        """
        unique_ids: List[str] = []
        for raw in ids:
            qid = normalize_wikidata_id(raw)
            if qid and qid not in unique_ids:
                unique_ids.append(qid)

        total = len(unique_ids)
        results: Dict[str, EnrichmentRecord] = {}
        to_fetch: List[str] = []

        for qid in unique_ids:
            cached = self.cache.get(qid)
            if cached is not None:
                results[qid] = cached
            else:
                to_fetch.append(qid)

        logger.info(f"Wikidata enrichment: {total} ids, {total - len(to_fetch)} cached, {len(to_fetch)} to fetch")

        processed = total - len(to_fetch)
        async with self._client() as client:
            for start in range(0, len(to_fetch), self.batch_size):
                batch = to_fetch[start:start + self.batch_size]
                batch_results = {qid: EnrichmentRecord(wikidata_id=qid) for qid in batch}

                try:
                    bindings = await self._query_batch(client, batch)
                    self._apply_bindings(batch_results, bindings)
                except ExtractionError as e:
                    logger.error(f"Wikidata batch starting at {batch[0]} failed ({len(batch)} ids): {e}")
                    results.update(batch_results)
                else:
                    for qid, record in batch_results.items():
                        results[qid] = self.cache.merge_non_null(qid, record)

                processed += len(batch)
                logger.debug(f"Wikidata batch done: {processed}/{total}")
                if on_progress:
                    on_progress(processed, total)

        return results

    async def _query_batch(self, client, batch: List[str]) -> List[Dict[str, Any]]:
        query = build_sparql_query(batch, self.language)
        context = {"batch_size": len(batch), "first_id": batch[0]}

        try:
            response = await self._request(
                client,
                "GET",
                self.sparql_url,
                params={"query": query, "format": "json"},
                headers={"Accept": "application/sparql-results+json"},
            )
        except MetadataEnrichmentError:
            raise
        except ExtractionError as e:
            raise MetadataEnrichmentError(
                f"SPARQL batch failed: {e.message}",
                context={**context, **e.context},
                original_exception=e
            )

        payload = self._decode_json(response)
        try:
            bindings = payload["results"]["bindings"]
        except (KeyError, TypeError) as e:
            raise MetadataEnrichmentError(
                "SPARQL response has no bindings",
                context=context,
                original_exception=e
            )
        if not isinstance(bindings, list):
            raise MetadataEnrichmentError("SPARQL bindings are not a list", context=context)
        return bindings

    @staticmethod
    def _apply_bindings(records: Dict[str, EnrichmentRecord], bindings: List[Dict[str, Any]]) -> None:
        for binding in bindings:
            if not isinstance(binding, dict):
                continue
            qid = normalize_wikidata_id(_binding_value(binding, "item"))
            record = records.get(qid) if qid else None
            if record is None:
                continue

            updates = {}
            for field, key in (("description", "description"), ("image_url", "image"), ("wikipedia_url", "article")):
                value = _binding_value(binding, key)
                if value and getattr(record, field) is None:
                    updates[field] = value
            if updates:
                records[qid] = record.model_copy(update=updates)
