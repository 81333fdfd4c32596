"""
Pytest configuration and fixtures
"""

import json
import pytest
import pytest_asyncio
import httpx
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from models.base import Base
from models.zone import Zone
from core.cache import InMemoryCache
from core.rate_limiter import RateLimiter
from ingestion.extractors.overpass import OverpassFetcher
from ingestion.enrichers.wikidata import WikidataEnricher
from ingestion.enrichers.wikipedia import WikipediaEnricher
from ingestion.runner import ImportRunner
from typing import AsyncGenerator

# Single shared in-memory database per test
TEST_DATABASE_URL = "sqlite+aiosqlite://"

OVERPASS_URL = "https://overpass.test/api/interpreter"
SPARQL_URL = "https://query.wikidata.test/sparql"
ENTITY_URL = "https://www.wikidata.test/wiki/Special:EntityData"
REST_URL_TEMPLATE = "https://{lang}.wikipedia.test/api/rest_v1"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def zone(db_session) -> Zone:
    zone = Zone(name="Paris Centre", lat=48.8566, lng=2.3522, radius_km=2.0)
    db_session.add(zone)
    await db_session.commit()
    return zone


def no_wait_limiter(name: str = "test") -> RateLimiter:
    return RateLimiter(name, 0)


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"Content-Type": "application/json"})


def source_kwargs(handler):
    """Constructor arguments for an HttpSource served by a MockTransport"""
    return {
        "max_retries": 1,
        "retry_delay": 0,
        "transport": httpx.MockTransport(handler),
    }


def make_fetcher(handler) -> OverpassFetcher:
    return OverpassFetcher(no_wait_limiter("overpass"), api_url=OVERPASS_URL, **source_kwargs(handler))


def make_wikidata(handler, batch_size: int = 50) -> WikidataEnricher:
    return WikidataEnricher(
        no_wait_limiter("wikidata"),
        cache=InMemoryCache(),
        sparql_url=SPARQL_URL,
        batch_size=batch_size,
        language="fr",
        **source_kwargs(handler)
    )


def make_wikipedia(handler) -> WikipediaEnricher:
    return WikipediaEnricher(
        no_wait_limiter("wikipedia"),
        cache=InMemoryCache(),
        entity_url=ENTITY_URL,
        rest_url_template=REST_URL_TEMPLATE,
        **source_kwargs(handler)
    )


def make_runner(session_factory, handler) -> ImportRunner:
    return ImportRunner(
        session_factory=session_factory,
        fetcher=make_fetcher(handler),
        metadata_enricher=make_wikidata(handler),
        content_enricher=make_wikipedia(handler),
        preferred_language="fr",
    )


# ----------------------------------------------------------------------------
# A small fake of the four external services
# ----------------------------------------------------------------------------

OVERPASS_ELEMENTS = [
    {
        "type": "node",
        "id": 101,
        "lat": 48.8606,
        "lon": 2.3376,
        "tags": {"name": "Musée du Louvre", "tourism": "museum", "wikidata": "Q19675"},
    },
    {
        "type": "way",
        "id": 202,
        "center": {"lat": 48.853, "lon": 2.3499},
        "tags": {
            "name": "Cathédrale Notre-Dame",
            "building": "cathedral",
            "historic": "cathedral",
            "wikidata": "Q2981",
            "wikipedia": "fr:Cathédrale Notre-Dame de Paris",
        },
    },
    {
        "type": "node",
        "id": 303,
        "lat": 48.85,
        "lon": 2.35,
        "tags": {"name": "Statue sans référence", "tourism": "artwork"},
    },
]

SPARQL_BINDINGS = [
    {
        "item": {"type": "uri", "value": "http://www.wikidata.org/entity/Q19675"},
        "description": {"type": "literal", "value": "musée d'art à Paris"},
        "image": {"type": "uri", "value": "http://commons.wikimedia.org/wiki/Special:FilePath/Louvre.jpg"},
        "article": {"type": "uri", "value": "https://fr.wikipedia.org/wiki/Mus%C3%A9e_du_Louvre"},
    },
]

SITELINKS = {
    "Q19675": {"frwiki": {"site": "frwiki", "title": "Musee du Louvre"}},
    "Q2981": {"enwiki": {"site": "enwiki", "title": "Notre-Dame de Paris"}},
}

ARTICLES = {
    "Musee_du_Louvre": {
        "lead": {"sections": [{"id": 0, "text": "<p>Le <b>Louvre</b> est un musée.</p>"}]},
        "remaining": {"sections": [{"id": 1, "line": "Histoire", "text": "<p>Ancien palais royal.</p>"}]},
    },
}

SUMMARIES = {
    "Notre-Dame_de_Paris": {"title": "Notre-Dame de Paris", "extract": "Notre-Dame is a cathedral."},
}


class FakeServices:
    """MockTransport handler answering like Overpass, Wikidata and Wikipedia"""

    def __init__(self, elements=None, bindings=None, overpass_status: int = 200):
        self.elements = OVERPASS_ELEMENTS if elements is None else elements
        self.bindings = SPARQL_BINDINGS if bindings is None else bindings
        self.overpass_status = overpass_status
        self.calls = []
        self.sparql_queries = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        path = request.url.path
        self.calls.append((request.method, host, path))

        if host == "overpass.test":
            if self.overpass_status != 200:
                return httpx.Response(self.overpass_status, text="overloaded")
            return json_response({"elements": self.elements})

        if host == "query.wikidata.test":
            self.sparql_queries.append(request.url.params["query"])
            return json_response({"results": {"bindings": self.bindings}})

        if host == "www.wikidata.test":
            qid = path.rsplit("/", 1)[-1].replace(".json", "")
            if qid not in SITELINKS:
                return httpx.Response(404)
            return json_response({"entities": {qid: {"id": qid, "sitelinks": SITELINKS[qid]}}})

        if host.endswith("wikipedia.test"):
            title = path.rsplit("/", 1)[-1]
            if "mobile-sections" in path and title in ARTICLES:
                return json_response(ARTICLES[title])
            if "summary" in path and title in SUMMARIES:
                return json_response(SUMMARIES[title])
            return httpx.Response(404)

        return httpx.Response(500)

    def count(self, host: str) -> int:
        return sum(1 for _method, call_host, _path in self.calls if call_host == host)


@pytest.fixture
def fake_services():
    return FakeServices()
