"""
Integration tests for the Duplicate Contacts API endpoints.

Runs the FastAPI app in-process with the database dependency pointed at
the in-memory test database.
"""
import pytest
from fastapi.testclient import TestClient

from rolodex.main import app
from rolodex.core.database import get_db
from rolodex.core.models import Contact, ContactTag, Conversation
from rolodex.services.dedup_service import DedupService


@pytest.fixture
def client(test_db):
    """Create test client with overridden database."""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestFindDuplicatesEndpoint:
    """Tests for GET /api/v1/duplicates."""

    @pytest.mark.integration
    def test_empty(self, client):
        response = client.get("/api/v1/duplicates")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.integration
    def test_pairs_sorted_by_score(self, client, sample_contacts):
        response = client.get("/api/v1/duplicates")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 3
        scores = [pair["score"] for pair in data]
        assert scores == sorted(scores, reverse=True)
        assert all(pair["reasons"] for pair in data)

    @pytest.mark.integration
    def test_normalized_name_pair(self, client, sample_contacts):
        data = client.get("/api/v1/duplicates").json()

        top = data[0]
        assert top["contact1"]["name"] == "Katie M. Tucker"
        assert top["contact2"]["name"] == "Katie Tucker"
        assert top["reasons"] == ["Same name (normalized)"]
        assert top["score"] >= 0.95

    @pytest.mark.integration
    def test_contacts_are_full_projections(self, client, sample_contacts, sample_company):
        data = client.get("/api/v1/duplicates").json()

        company_pair = data[1]
        contact1 = company_pair["contact1"]
        assert contact1["id"] == sample_contacts[2].id
        assert contact1["companyId"] == sample_company.id
        assert contact1["company"] == {"id": sample_company.id, "name": "Acme Robotics"}
        assert contact1["companyLinks"] == []
        assert contact1["ecosystem"] == "ROLODEX"
        assert contact1["status"] == "NEW"
        assert contact1["flagged"] is False
        assert "linkedinUrl" in contact1
        assert company_pair["contact2"]["companyName"] == "acme robotics"

    @pytest.mark.integration
    def test_email_pair(self, client, sample_contacts):
        data = client.get("/api/v1/duplicates").json()

        email_pair = data[2]
        assert email_pair["reasons"] == ["Same email"]
        assert email_pair["contact1"]["email"] == "shared@x.com"
        assert email_pair["contact2"]["email"] == "SHARED@x.com"

    @pytest.mark.integration
    def test_unexpected_failure(self, client, sample_contacts, monkeypatch):
        def explode(self):
            raise RuntimeError("boom")

        monkeypatch.setattr(DedupService, "find_duplicates", explode)

        response = client.get("/api/v1/duplicates")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to find duplicates"}


class TestMergeEndpoint:
    """Tests for POST /api/v1/duplicates/merge."""

    @pytest.mark.integration
    def test_merge(self, client, test_db, merge_pair):
        keep_id = merge_pair["keep"].id
        remove_id = merge_pair["remove"].id

        response = client.post(
            "/api/v1/duplicates/merge",
            json={"keepId": keep_id, "removeId": remove_id, "fieldSelections": {"phone": 2}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Contacts merged successfully"
        assert data["keepId"] == keep_id
        assert data["removeId"] == remove_id
        assert data["updatedFields"] == ["phone"]
        assert data["reassigned"]["conversations"] == 1

        assert test_db.get(Contact, remove_id) is None
        assert test_db.get(Contact, keep_id).phone == "555-2222"

    @pytest.mark.integration
    def test_merged_pair_no_longer_listed(self, client, sample_contacts):
        client.post(
            "/api/v1/duplicates/merge",
            json={"keepId": sample_contacts[1].id, "removeId": sample_contacts[0].id},
        )

        names = [
            (pair["contact1"]["name"], pair["contact2"]["name"])
            for pair in client.get("/api/v1/duplicates").json()
        ]
        assert ("Katie M. Tucker", "Katie Tucker") not in names
        assert len(names) == 2

    @pytest.mark.integration
    def test_equal_ids(self, client, test_db, merge_pair):
        keep_id = merge_pair["keep"].id

        response = client.post(
            "/api/v1/duplicates/merge", json={"keepId": keep_id, "removeId": keep_id},
        )

        assert response.status_code == 400
        assert test_db.query(Contact).count() == 3

    @pytest.mark.integration
    def test_equal_ids_absent_contact(self, client):
        response = client.post("/api/v1/duplicates/merge", json={"keepId": 5, "removeId": 5})

        assert response.status_code == 400

    @pytest.mark.integration
    def test_missing_ids(self, client):
        response = client.post("/api/v1/duplicates/merge", json={"keepId": 1})

        assert response.status_code == 400
        assert "detail" in response.json()

    @pytest.mark.integration
    def test_unknown_contact(self, client, test_db, merge_pair):
        response = client.post(
            "/api/v1/duplicates/merge",
            json={"keepId": merge_pair["keep"].id, "removeId": 9999},
        )

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]
        assert test_db.query(Contact).count() == 3

    @pytest.mark.integration
    def test_both_absent(self, client):
        response = client.post("/api/v1/duplicates/merge", json={"keepId": 5, "removeId": 9999})

        assert response.status_code == 404

    @pytest.mark.integration
    def test_bad_selection(self, client, test_db, merge_pair):
        remove_id = merge_pair["remove"].id

        response = client.post(
            "/api/v1/duplicates/merge",
            json={
                "keepId": merge_pair["keep"].id,
                "removeId": remove_id,
                "fieldSelections": {"nickname": 1},
            },
        )

        assert response.status_code == 400
        assert "nickname" in response.json()["detail"]
        assert test_db.get(Contact, remove_id) is not None

    @pytest.mark.integration
    def test_malformed_body(self, client):
        response = client.post(
            "/api/v1/duplicates/merge", json={"keepId": "not-a-number", "removeId": 2},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request body"

    @pytest.mark.integration
    def test_persistence_failure_rolls_back(self, client, test_db, merge_pair, monkeypatch):
        remove_id = merge_pair["remove"].id
        conv_id = merge_pair["conv_remove"].id

        def explode(self, relation, keep_id, remove_id):
            raise RuntimeError("disk full")

        monkeypatch.setattr(DedupService, "_dedupe_join_rows", explode)

        response = client.post(
            "/api/v1/duplicates/merge",
            json={"keepId": merge_pair["keep"].id, "removeId": remove_id},
        )

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to merge contacts"}
        assert test_db.get(Contact, remove_id) is not None
        assert test_db.get(Conversation, conv_id).contact_id == remove_id
        assert test_db.query(ContactTag).filter(ContactTag.contact_id == remove_id).count() == 2


class TestServiceEndpoints:

    @pytest.mark.integration
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Rolodex Dedup Service"

    @pytest.mark.integration
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
