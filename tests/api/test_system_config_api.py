"""Tests for system configuration endpoints."""


class TestSystemConfigApi:

    def test_get_defaults(self, client):
        response = client.get("/system-config")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] is None
        assert data["default_frequency"] == "WEEKLY"
        assert data["default_number_of_payments"] == 3

    def test_patch_saves_and_records_actor(self, client):
        response = client.patch(
            "/system-config",
            json={"receivable_due_date_days": 14},
            headers={"X-User-Id": "admin"},
        )
        assert response.status_code == 200
        assert response.json()["updated_by"] == "admin"

        data = client.get("/system-config").json()
        assert data["id"] is not None
        assert data["receivable_due_date_days"] == 14

    def test_patch_out_of_range_share_returns_400(self, client):
        response = client.patch(
            "/system-config", json={"driver_share_percentage": "150"}
        )
        assert response.status_code == 400

    def test_patch_bad_frequency_returns_422(self, client):
        response = client.patch("/system-config", json={"default_frequency": "HOURLY"})
        assert response.status_code == 422
