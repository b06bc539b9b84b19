"""Tests for the public publications store: feed, search, detail, edit, report."""
import pytest

from marketplace.core.exceptions import NotFoundError, ValidationError
from marketplace.schemas.report_schema import ReportCreate
from marketplace.services.wizard_service import PublicationWizard
from marketplace.stores.publications_store import PublicationsStore
from tests.conftest import make_publication_dto


def _seed(backend) -> None:
    backend.add_publication(make_publication_dto(id=1, neighborhood="Centro"))
    backend.add_publication(make_publication_dto(id=2, neighborhood="Laureles", propertyTitle="Apartamento"))
    backend.add_publication(make_publication_dto(id=3, status="INACTIVE"))


@pytest.mark.asyncio
async def test_fetch_public_feed_without_token(backend, anonymous_api):
    _seed(backend)
    store = PublicationsStore(anonymous_api)

    publications = await store.fetch_publications()

    assert [p.id for p in publications] == [1, 2]
    assert store.state.last_fetch_time is not None
    assert [p.id for p in store.search("apartamento")] == [2]


@pytest.mark.asyncio
async def test_fetch_failure_returns_empty(backend, anonymous_api):
    backend.fail("publications.all", 500)
    store = PublicationsStore(anonymous_api)

    assert await store.fetch_publications() == []
    assert store.state.error == "Error al cargar las publicaciones"
    assert store.state.last_fetch_time is None


@pytest.mark.asyncio
async def test_search_marks_favorites(backend, user_api):
    _seed(backend)
    backend.favorites.add(2)
    store = PublicationsStore(user_api)

    results = await store.search_publications({"neighborhood": "Laureles", "municipality": ""})

    assert [p.id for p in results] == [2]
    assert results[0].favorited is True
    assert results[0].is_new is True
    assert backend.requests[0] == ("publications.search", {"neighborhood": "Laureles"})
    store.clear_filters()
    assert store.state.filtered_results is None


@pytest.mark.asyncio
async def test_fetch_by_id_upserts(backend, anonymous_api):
    _seed(backend)
    store = PublicationsStore(anonymous_api)
    await store.fetch_publications()

    backend.publications[1]["propertyPrice"] = 250000
    publication = await store.fetch_publication_by_id(1)

    assert publication.price == "$250,000"
    assert [p.id for p in store.state.publications] == [1, 2]
    assert store.find(1).price == "$250,000"


@pytest.mark.asyncio
async def test_fetch_by_id_not_found(backend, anonymous_api):
    store = PublicationsStore(anonymous_api)
    with pytest.raises(NotFoundError):
        await store.fetch_publication_by_id(404)
    assert store.state.error == "El recurso solicitado no fue encontrado."


@pytest.mark.asyncio
async def test_fetch_by_id_keeps_cached_title(backend, anonymous_api):
    _seed(backend)
    store = PublicationsStore(anonymous_api)
    await store.fetch_publications()

    backend.publications[1]["propertyTitle"] = None
    publication = await store.fetch_publication_by_id(1)

    assert publication.title == "Casa amplia con jardín"
    assert publication.property_title == "Casa amplia con jardín"


@pytest.mark.asyncio
async def test_submit_wizard(backend, user_api):
    _seed(backend)
    store = PublicationsStore(user_api)
    original = await store.fetch_publication_by_id(1)

    wizard = PublicationWizard.from_publication(original)
    wizard.set_value("title", "  Casa renovada  ")
    wizard.set_value("property_price", "25000050")
    wizard.attach_images([("nueva.jpg", b"\xff\xd8jpeg", "image/jpeg")])

    updated = await store.submit_wizard(1, wizard)

    fields = dict(
        (key, value) for key, value in backend.requests[-1][1] if isinstance(value, str)
    )
    assert fields["propertyTitle"] == "Casa renovada"
    assert fields["PropertyPrice"] == "250000.50"
    assert not any(key.startswith("availableTimes") for key in fields)
    assert updated.title == "Casa renovada"
    assert updated.property_price == 250000.5
    assert store.find(1).title == "Casa renovada"


@pytest.mark.asyncio
async def test_update_keeps_title_when_server_drops_it(backend, user_api):
    _seed(backend)
    backend.drop_title_on_update = True
    store = PublicationsStore(user_api)
    wizard = PublicationWizard.from_publication(await store.fetch_publication_by_id(2))

    updated = await store.submit_wizard(2, wizard)

    assert updated.title == "Apartamento"


@pytest.mark.asyncio
async def test_submit_invalid_wizard_sends_nothing(backend, user_api):
    _seed(backend)
    store = PublicationsStore(user_api)
    wizard = PublicationWizard.from_publication(await store.fetch_publication_by_id(1))
    wizard.set_value("property_price", "")

    with pytest.raises(ValidationError):
        await store.submit_wizard(1, wizard)
    assert backend.calls["publications.update"] == 0


@pytest.mark.asyncio
async def test_report_publication(backend, user_api):
    _seed(backend)
    store = PublicationsStore(user_api)

    body = await store.report_publication(
        ReportCreate(publication_id=1, reason="FRAUD", description="Precio falso")
    )

    assert body["message"] == "Reporte enviado"
    assert backend.reports[body["id"]]["status"] == "PENDING"
    assert backend.publications[1]["isReported"] is True


@pytest.mark.asyncio
async def test_active_publications(backend, user_api):
    backend.add_publication(make_publication_dto(id=1))
    store = PublicationsStore(user_api)
    await store.fetch_publication_by_id(1)
    backend.publications[5] = make_publication_dto(id=5, status="INACTIVE")
    await store.fetch_publication_by_id(5)

    assert [p.id for p in store.active_publications()] == [1]
