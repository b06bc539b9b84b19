"""Tests for client-side search, status filters and stats."""
from marketplace.services.filter_service import (
    ALL,
    filter_publications,
    filter_reports,
    publication_stats,
    report_stats,
)
from marketplace.services.mapper_service import publication_from_dto, report_from_dto
from tests.conftest import make_publication_dto, make_report_dto


def _publications():
    return [
        publication_from_dto(make_publication_dto(id=1, propertyTitle="Casa en Laureles")),
        publication_from_dto(make_publication_dto(id=2, propertyTitle="Apartamento moderno", status="INACTIVE")),
        publication_from_dto(make_publication_dto(id=3, propertyTitle="Lote rural", isReported=True, userName="Pedro")),
    ]


class TestFilterPublications:
    def test_no_filters(self):
        assert len(filter_publications(_publications())) == 3

    def test_term_matches_title_case_insensitive(self):
        result = filter_publications(_publications(), "laureles")
        assert [p.id for p in result] == [1]

    def test_term_matches_publisher(self):
        assert [p.id for p in filter_publications(_publications(), "pedro")] == [3]

    def test_status_uses_display_status(self):
        assert [p.id for p in filter_publications(_publications(), status="REPORTED")] == [3]
        assert [p.id for p in filter_publications(_publications(), status="INACTIVE")] == [2]

    def test_status_matches_raw_status_too(self):
        # publication 3 is ACTIVE underneath its REPORTED badge
        assert [p.id for p in filter_publications(_publications(), status="ACTIVE")] == [1, 3]

    def test_all(self):
        assert len(filter_publications(_publications(), "", ALL)) == 3


class TestPublicationStats:
    def test_counts(self):
        assert publication_stats(_publications()) == {
            "active": 2,
            "inactive": 1,
            "reported": 1,
            "total": 3,
        }


class TestReports:
    def _reports(self):
        return [
            report_from_dto(make_report_dto(id=1, reason="FRAUD")),
            report_from_dto(make_report_dto(id=2, reason="SPAM", status="RESOLVED")),
            report_from_dto(make_report_dto(id=3, reason="OTHER", status="REJECTED", reporterName="Ana")),
        ]

    def test_filter_by_status(self):
        assert [r.id for r in filter_reports(self._reports(), status="PENDING")] == [1]

    def test_filter_by_term(self):
        assert [r.id for r in filter_reports(self._reports(), "ana")] == [3]
        assert [r.id for r in filter_reports(self._reports(), "spam")] == [2]

    def test_stats(self):
        assert report_stats(self._reports()) == {"pending": 1, "resolved": 1, "rejected": 1, "total": 3}
