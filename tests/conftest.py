"""
Shared fixtures: in-memory stores, a scripted translation backend and an
image relocator whose HTTP traffic never leaves the process.
"""

import httpx
import pytest

from polypage.core.models import (
    CheckboxField,
    ImageUnit,
    RichTextField,
    SourceDocument,
    TextUnit,
    TitleField,
)
from polypage.i18n.translator import ContentTranslator, TranslationBackend
from polypage.services.images import ImageRelocator
from polypage.services.orchestrator import BatchOrchestrator
from polypage.services.replicator import PageReplicator
from polypage.services.units import ContentUnitTranslator
from polypage.storage.local import (
    InMemoryDocumentStorage,
    InMemoryRecordStorage,
    LocalContentStorage,
)

SOURCE_DB = "source-db"
DESTINATIONS = {"fr": "fr-db", "es": "es-db", "de": "de-db"}

FRENCH = {"Hello": "Bonjour", "World": "Monde"}


class ScriptedBackend(TranslationBackend):
    """
    Translates from a lookup table, else tags the text with the target.

    Any (text, target) pair listed in `failures` raises; any listed in
    `empty` comes back blank.
    """

    def __init__(self, table: dict[str, dict[str, str]] | None = None):
        self.table = table or {"fr": dict(FRENCH)}
        self.calls: list[tuple[str, str, str]] = []
        self.failures: set[tuple[str, str]] = set()
        self.empty: set[tuple[str, str]] = set()

    async def translate(self, text: str, source: str, target: str) -> str:
        self.calls.append((text, source, target))
        if (text, target) in self.failures:
            raise RuntimeError(f"service unavailable for {target}")
        if (text, target) in self.empty:
            return ""
        return self.table.get(target, {}).get(text, f"[{target}] {text}")


def image_transport(status: int = 200, body: bytes = b"\xff\xd8jpeg-bytes"):
    """MockTransport serving every GET with the given status and body."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, content=body)

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


def make_doc(
    doc_id: str,
    title: str = "Hello",
    desc: str = "World",
    published: bool = True,
    **extra_fields,
) -> SourceDocument:
    fields = {
        "Name": TitleField(text=title, field_id="title"),
        "Desc": RichTextField(text=desc, field_id="d%3Ae"),
        "Published": CheckboxField(checked=published, field_id="pub"),
    }
    fields.update(extra_fields)
    return SourceDocument(id=doc_id, url=f"https://www.notion.so/{doc_id}", fields=fields)


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def translator(backend):
    return ContentTranslator(backend, source="en")


@pytest.fixture
def documents():
    return InMemoryDocumentStorage()


@pytest.fixture
def records():
    return InMemoryRecordStorage()


@pytest.fixture
def blobs(tmp_path):
    return LocalContentStorage(str(tmp_path / "blobs"))


@pytest.fixture
def scratch_dir(tmp_path):
    return tmp_path / "scratch"


@pytest.fixture
def transport():
    return image_transport()


@pytest.fixture
def relocator(blobs, scratch_dir, transport):
    return ImageRelocator(
        blobs,
        http=httpx.AsyncClient(transport=transport),
        scratch_dir=scratch_dir,
        attempts=3,
        delay_seconds=0,
    )


@pytest.fixture
def unit_translator(translator, relocator):
    return ContentUnitTranslator(translator, relocator)


@pytest.fixture
def replicator(documents, translator, unit_translator):
    return PageReplicator(documents, translator, unit_translator)


@pytest.fixture
def orchestrator(documents, records, replicator):
    return BatchOrchestrator(
        documents,
        records,
        replicator,
        source_collection_id=SOURCE_DB,
        destinations=DESTINATIONS,
        page_size=100,
    )


@pytest.fixture
def hello_doc(documents):
    """The canonical one-paragraph document, seeded in the source database."""
    return documents.add_document(
        SOURCE_DB,
        make_doc("doc-hello"),
        units=[TextUnit(kind="paragraph", runs=["Hello"])],
    )


@pytest.fixture
def image_unit():
    return ImageUnit(file_url="https://files.example.com/cat.jpg?signature=abc")
