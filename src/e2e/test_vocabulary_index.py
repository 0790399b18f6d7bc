from types import SimpleNamespace

import pytest
from elasticsearch import ApiError, ConnectionError as ESConnectionError

from materials_ngrams.config import VocabularySettings
from materials_ngrams.errors import ConfigurationError, SearchError
from materials_ngrams.vocabulary import VocabularyIndex


class FakeClient:
    """Stands in for elasticsearch.Elasticsearch; records calls, returns canned hits."""
    def __init__(self, hits=None, exc=None):
        self.hits = hits or []
        self.exc = exc
        self.calls = []
        self.closed = False

    def search(self, *, index, size, query):
        self.calls.append({"index": index, "size": size, "query": query})
        if self.exc is not None:
            raise self.exc
        return {"hits": {"hits": self.hits}}

    def close(self):
        self.closed = True


RAW_HITS = [
    {"_id": "300015050", "_score": 12.5, "_source": {
        "name": "oil paint", "scope_note": "Paint made with drying oil.",
        "terms": ["oil paint", "oil colors"], "facet_name": "Materials", "record_type": "Concept"}},
    {"_id": "300015045", "_score": 4.0, "_source": {"name": "oils"}},
]


def test_issues_weighted_best_fields_query():
    client = FakeClient(RAW_HITS)
    VocabularyIndex(client=client).search("oil paint")
    call = client.calls[0]
    assert call["index"] == "aatsy_subjects"
    assert call["size"] == 5
    mm = call["query"]["bool"]["must"]["multi_match"]
    assert mm == {
        "query": "oil paint",
        "fields": ["name^10", "scope_note^5", "terms^3"],
        "type": "best_fields",
    }


def test_hits_are_converted_in_rank_order():
    hits = VocabularyIndex(client=FakeClient(RAW_HITS)).search("oil paint", 5)
    assert [h.id for h in hits] == ["300015050", "300015045"]
    first = hits[0]
    assert first.score == 12.5
    assert first.subject.terms == ["oil paint", "oil colors"]
    assert first.subject.facet_name == "Materials"
    # missing fields default to empty
    assert hits[1].subject.terms == [] and hits[1].subject.record_type == ""


def test_custom_index_and_size():
    client = FakeClient(RAW_HITS)
    idx = VocabularyIndex(VocabularySettings(index="aat_test", candidates=1), client=client)
    assert len(idx.search("oil paint")) == 1
    assert client.calls[0]["index"] == "aat_test" and client.calls[0]["size"] == 1


def test_non_success_status_raises_search_error():
    exc = ApiError("search_phase_execution_exception", meta=SimpleNamespace(status=400), body={"error": "bad"})
    with pytest.raises(SearchError) as info:
        VocabularyIndex(client=FakeClient(exc=exc)).search("oil paint")
    assert info.value.status == 400
    assert info.value.body == {"error": "bad"}


def test_transport_failure_raises_search_error():
    with pytest.raises(SearchError):
        VocabularyIndex(client=FakeClient(exc=ESConnectionError("connection refused"))).search("oil paint")


def test_close_closes_the_client():
    client = FakeClient()
    VocabularyIndex(client=client).close()
    assert client.closed


def test_invalid_settings_fail_fast():
    with pytest.raises(ConfigurationError):
        VocabularyIndex(VocabularySettings(max_workers=0), client=FakeClient())


def test_non_string_terms_and_fields_are_dropped():
    raw = [{"_id": 300015050, "_score": None, "_source": {
        "name": None, "terms": [None, "Oil Colors", 7], "facet_name": ["Materials"]}}]
    hit = VocabularyIndex(client=FakeClient(raw)).search("oil colors")[0]
    assert hit.id == "300015050" and hit.score == 0.0
    assert hit.subject.name == "" and hit.subject.facet_name == ""
    assert hit.subject.terms == ["Oil Colors"]


@pytest.mark.parametrize("raw", [{"_source": {"name": "oil paint"}}, None, "300015050"])
def test_hit_without_id_raises_search_error(raw):
    with pytest.raises(SearchError):
        VocabularyIndex(client=FakeClient([raw])).search("oil paint")


@pytest.mark.parametrize("resp", [{}, {"hits": None}, None])
def test_malformed_response_raises_search_error(resp):
    class OddClient(FakeClient):
        def search(self, *, index, size, query):
            return resp

    with pytest.raises(SearchError):
        VocabularyIndex(client=OddClient()).search("oil paint")
