"""Integration tests for the job lifecycle."""

import pytest

from conftest import CUSTOMER_ADDRESS, auth_headers, create_admin, create_job, signup


class TestCreateJob:
    def test_create(self, client, customer):
        response = client.post(
            "/jobs",
            json={"title": " Logo ", "description": "Vector logo", "budget": "10.50", "duration": 3},
            headers=auth_headers(customer["token"]),
        )
        assert response.status_code == 201

        job = response.json()
        assert job["title"] == "Logo"
        assert job["budget"] == "10.5"
        assert job["duration"] == 3
        assert job["created_by"] == customer["subject"]["id"]
        assert job["customer_display_name"] == "Customer"
        assert job["customer_ethereum_address"] == CUSTOMER_ADDRESS
        assert job["application_count"] == 0
        assert job["is_suspended"] is False
        assert response.headers["location"] == f"/jobs/{job['id']}"

    def test_zero_budget_and_duration_are_unset(self, client, customer):
        job = create_job(client, customer["token"], budget="0", duration=0)
        assert job["budget"] is None
        assert job["duration"] is None

    @pytest.mark.parametrize("body,message", [
        ({"description": "d"}, "title: is required"),
        ({"title": "  ", "description": "d"}, "title: is required"),
        ({"title": "t"}, "description: is required"),
        ({"title": "t", "description": "d", "budget": "-1"}, "budget: must be positive"),
        ({"title": "t", "description": "d", "duration": -1}, "duration: must not be negative"),
    ])
    def test_validation(self, client, customer, body, message):
        response = client.post("/jobs", json=body, headers=auth_headers(customer["token"]))
        assert response.status_code == 422
        assert response.json()["message"] == message

    def test_wallet_required(self, client):
        person = signup(client, "walletless")
        response = client.post(
            "/jobs", json={"title": "t", "description": "d"}, headers=auth_headers(person["token"])
        )
        assert response.status_code == 422
        assert response.json()["message"] == "customer does not have wallet"

    def test_authentication_required(self, client):
        response = client.post("/jobs", json={"title": "t", "description": "d"})
        assert response.status_code == 401


class TestReadJobs:
    def test_public_get(self, client, job):
        response = client.get(f"/jobs/{job['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == job["title"]

    def test_missing(self, client):
        assert client.get("/jobs/missing").status_code == 404

    def test_list_newest_first_with_counts(self, client, customer, performer):
        first = create_job(client, customer["token"], title="First")
        second = create_job(client, customer["token"], title="Second")
        client.post(
            f"/jobs/{first['id']}/applications",
            json={"comment": "hi", "price": "1"},
            headers=auth_headers(performer["token"]),
        )

        response = client.get("/jobs")
        assert response.status_code == 200
        jobs = {j["id"]: j for j in response.json()}
        assert jobs[first["id"]]["application_count"] == 1
        assert jobs[second["id"]]["application_count"] == 0
        assert [j["id"] for j in response.json()][0] == second["id"]


class TestPatchJob:
    def test_owner_updates_present_fields(self, client, customer, job):
        response = client.put(
            f"/jobs/{job['id']}",
            json={"title": "New title"},
            headers=auth_headers(customer["token"]),
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "New title"
        assert updated["description"] == job["description"]
        assert updated["budget"] == job["budget"]

    def test_clear_budget(self, client, customer, job):
        response = client.put(
            f"/jobs/{job['id']}", json={"budget": "0"}, headers=auth_headers(customer["token"])
        )
        assert response.json()["budget"] is None

    def test_empty_title_rejected(self, client, customer, job):
        response = client.put(
            f"/jobs/{job['id']}", json={"title": ""}, headers=auth_headers(customer["token"])
        )
        assert response.status_code == 422

    def test_other_person_cannot_update(self, client, stranger, job):
        response = client.put(
            f"/jobs/{job['id']}", json={"title": "x"}, headers=auth_headers(stranger["token"])
        )
        assert response.status_code == 403


class TestModeration:
    def test_admin_blocks_job(self, client, app, job):
        admin = create_admin(client, app)

        response = client.post(f"/jobs/{job['id']}/block", headers=auth_headers(admin["token"]))
        assert response.status_code == 204

        assert client.get(f"/jobs/{job['id']}").status_code == 404
        assert job["id"] not in [j["id"] for j in client.get("/jobs").json()]

    def test_owner_cannot_block(self, client, customer, job):
        response = client.post(f"/jobs/{job['id']}/block", headers=auth_headers(customer["token"]))
        assert response.status_code == 403

    def test_suspend_and_resume(self, client, customer, performer, job):
        headers = auth_headers(customer["token"])

        assert client.post(f"/jobs/{job['id']}/suspend", headers=headers).status_code == 204
        assert client.get(f"/jobs/{job['id']}").json()["is_suspended"] is True

        response = client.post(
            f"/jobs/{job['id']}/applications",
            json={"comment": "hi", "price": "1"},
            headers=auth_headers(performer["token"]),
        )
        assert response.status_code == 422
        assert response.json()["message"] == "job does not accept new applications"

        assert client.post(f"/jobs/{job['id']}/resume", headers=headers).status_code == 204
        assert client.get(f"/jobs/{job['id']}").json()["is_suspended"] is False

    def test_resume_not_suspended(self, client, customer, job):
        response = client.post(
            f"/jobs/{job['id']}/resume", headers=auth_headers(customer["token"])
        )
        assert response.status_code == 422
        assert response.json()["message"] == "job is not suspended"

    def test_stranger_cannot_suspend(self, client, stranger, job):
        response = client.post(
            f"/jobs/{job['id']}/suspend", headers=auth_headers(stranger["token"])
        )
        assert response.status_code == 403
