"""
Unit tests for the Overpass extractor and shared HTTP plumbing
"""

import httpx
import pytest
from urllib.parse import parse_qs
from ingestion.base import HttpSource
from ingestion.extractors.overpass import build_query, wikipedia_url_from_tag
from core.exceptions import (
    GeoQueryError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
    RetryableError,
    ExtractionError,
)
from models.base import OsmType
from tests.conftest import (
    OVERPASS_ELEMENTS,
    FakeServices,
    json_response,
    make_fetcher,
    no_wait_limiter,
)


class TestBuildQuery:
    """Test Overpass QL generation"""

    def test_query_shape(self):
        query = build_query(48.85, 2.35, 1.5)

        assert query.startswith("[out:json][timeout:60];")
        assert query.rstrip().endswith("out center tags;")
        assert "(around:1500,48.85,2.35)" in query

    def test_every_clause_requires_wikidata(self):
        clauses = [line for line in build_query(1, 2, 1).splitlines() if "(around:" in line]

        # 4 tag families x node/way/relation
        assert len(clauses) == 12
        assert all('["wikidata"]' in clause for clause in clauses)

    def test_wikipedia_tag_to_url(self):
        assert wikipedia_url_from_tag("fr:Tour Eiffel") == "https://fr.wikipedia.org/wiki/Tour_Eiffel"
        assert wikipedia_url_from_tag("Eiffel Tower") == "https://en.wikipedia.org/wiki/Eiffel_Tower"
        assert wikipedia_url_from_tag("") is None
        assert wikipedia_url_from_tag(None) is None


class TestOverpassFetcher:
    """Test fetching and parsing of OSM elements"""

    @pytest.mark.asyncio
    async def test_fetch_parses_and_filters(self):
        services = FakeServices()
        fetcher = make_fetcher(services)

        pois = await fetcher.fetch_pois(48.85, 2.35, 2.0)

        assert [poi.osm_id for poi in pois] == ["N101", "W202"]
        louvre, notre_dame = pois
        assert louvre.osm_type == OsmType.NODE
        assert (louvre.lat, louvre.lng) == (48.8606, 2.3376)
        assert louvre.wikidata_id == "Q19675"
        assert louvre.osm_tags == ["tourism:museum"]
        # Ways are located by their center
        assert (notre_dame.lat, notre_dame.lng) == (48.853, 2.3499)
        assert notre_dame.wikipedia_url == "https://fr.wikipedia.org/wiki/Cathédrale_Notre-Dame_de_Paris"

    @pytest.mark.asyncio
    async def test_posts_form_encoded_query(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["form"] = parse_qs(request.content.decode())
            return json_response({"elements": []})

        pois = await make_fetcher(handler).fetch_pois(1.0, 2.0, 1.0)

        assert pois == []
        assert seen["method"] == "POST"
        assert seen["form"]["data"][0].startswith("[out:json]")

    def test_parse_skips_incomplete_and_duplicates(self):
        fetcher = make_fetcher(FakeServices())
        elements = OVERPASS_ELEMENTS + [
            dict(OVERPASS_ELEMENTS[0]),
            {"type": "node", "id": 404, "tags": {"name": "Nowhere", "wikidata": "Q4"}},
            {"type": "node", "id": 405, "lat": 1, "lon": 2, "tags": {"name": "No id"}},
        ]

        pois = fetcher.parse_elements(elements)

        assert [poi.osm_id for poi in pois] == ["N101", "W202"]

    @pytest.mark.asyncio
    async def test_http_error_raises_geo_query_error(self):
        fetcher = make_fetcher(FakeServices(overpass_status=504))

        with pytest.raises(GeoQueryError):
            await fetcher.fetch_pois(48.85, 2.35, 2.0)

    @pytest.mark.asyncio
    async def test_malformed_payload_raises_geo_query_error(self):
        fetcher = make_fetcher(lambda request: json_response({"remark": "runtime error"}))

        with pytest.raises(GeoQueryError):
            await fetcher.fetch_pois(48.85, 2.35, 2.0)

    @pytest.mark.asyncio
    async def test_non_json_payload_raises_geo_query_error(self):
        fetcher = make_fetcher(lambda request: httpx.Response(200, text="<html>busy</html>"))

        with pytest.raises(GeoQueryError):
            await fetcher.fetch_pois(48.85, 2.35, 2.0)


class TestHttpSourceRetries:
    """Test retry logic of the shared request helper"""

    def make_source(self, handler, max_retries: int = 3) -> HttpSource:
        return HttpSource(
            no_wait_limiter(),
            max_retries=max_retries,
            retry_delay=0,
            transport=httpx.MockTransport(handler),
        )

    async def request(self, source: HttpSource):
        async with source._client() as client:
            return await source._request(client, "GET", "https://service.test/resource")

    @pytest.mark.asyncio
    async def test_retries_server_errors_then_succeeds(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                return httpx.Response(503)
            return json_response({"ok": True})

        response = await self.request(self.make_source(handler))

        assert response.json() == {"ok": True}
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_server_errors_exhaust_retries(self):
        source = self.make_source(lambda request: httpx.Response(500), max_retries=2)

        with pytest.raises(NetworkError) as exc_info:
            await self.request(source)

        assert isinstance(exc_info.value, RetryableError)
        assert exc_info.value.context["retry_count"] == 2
        assert not hasattr(exc_info.value, "max_retries")

    @pytest.mark.asyncio
    async def test_rate_limited_honours_retry_after(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                return httpx.Response(429, headers={"Retry-After": "0"})
            return json_response({})

        await self.request(self.make_source(handler))

        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_exhausts_retries(self):
        source = self.make_source(lambda request: httpx.Response(429, headers={"Retry-After": "0"}), max_retries=1)

        with pytest.raises(RateLimitError):
            await self.request(source)

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(404)

        with pytest.raises(ResourceNotFoundError):
            await self.request(self.make_source(handler))

        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_client_error_raises_extraction_error(self):
        with pytest.raises(ExtractionError) as exc_info:
            await self.request(self.make_source(lambda request: httpx.Response(400)))

        assert exc_info.value.context["status_code"] == 400

    @pytest.mark.asyncio
    async def test_transport_error_exhausts_retries(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError):
            await self.request(self.make_source(handler, max_retries=2))

    @pytest.mark.asyncio
    async def test_sends_user_agent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["User-Agent"]
            return json_response({})

        source = HttpSource(no_wait_limiter(), user_agent="TestAgent/1.0", transport=httpx.MockTransport(handler))
        await self.request(source)

        assert seen["ua"] == "TestAgent/1.0"
