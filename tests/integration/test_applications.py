"""Integration tests for applications and their chats."""

import pytest

from conftest import (
    PERFORMER_ADDRESS,
    apply,
    auth_headers,
    create_contract,
    create_job,
    signup,
)


class TestCreateApplication:
    def test_apply(self, client, customer, performer, job):
        response = client.post(
            f"/jobs/{job['id']}/applications",
            json={"comment": "  I have done this before  ", "price": "30.10"},
            headers=auth_headers(performer["token"]),
        )
        assert response.status_code == 201

        application = response.json()
        assert application["job_id"] == job["id"]
        assert application["applicant_id"] == performer["subject"]["id"]
        assert application["applicant_ethereum_address"] == PERFORMER_ADDRESS
        assert application["comment"] == "I have done this before"
        assert application["price"] == "30.1"
        assert response.headers["location"] == f"/applications/{application['id']}"

    def test_duplicate(self, client, performer, job, application):
        response = client.post(
            f"/jobs/{job['id']}/applications",
            json={"comment": "again", "price": "1"},
            headers=auth_headers(performer["token"]),
        )
        assert response.status_code == 409
        assert response.json()["message"] == "application already exists"

    @pytest.mark.parametrize("body,message", [
        ({"price": "1"}, "comment: is required"),
        ({"comment": "hi"}, "price: is required"),
        ({"comment": "hi", "price": "0"}, "price: is required"),
        ({"comment": "hi", "price": "-5"}, "price: must be positive"),
    ])
    def test_validation(self, client, performer, job, body, message):
        response = client.post(
            f"/jobs/{job['id']}/applications", json=body, headers=auth_headers(performer["token"])
        )
        assert response.status_code == 422
        assert response.json()["message"] == message

    def test_creator_cannot_apply(self, client, customer, job):
        response = client.post(
            f"/jobs/{job['id']}/applications",
            json={"comment": "mine", "price": "1"},
            headers=auth_headers(customer["token"]),
        )
        assert response.status_code == 403

    def test_wallet_required(self, client, job):
        person = signup(client, "walletless")
        response = client.post(
            f"/jobs/{job['id']}/applications",
            json={"comment": "hi", "price": "1"},
            headers=auth_headers(person["token"]),
        )
        assert response.status_code == 422
        assert response.json()["message"] == "applicant does not have wallet"

    def test_missing_job(self, client, performer):
        response = client.post(
            "/jobs/missing/applications",
            json={"comment": "hi", "price": "1"},
            headers=auth_headers(performer["token"]),
        )
        assert response.status_code == 404


class TestReadApplications:
    def test_visible_to_applicant_and_creator(self, client, customer, performer, stranger, application):
        path = f"/applications/{application['id']}"
        assert client.get(path, headers=auth_headers(performer["token"])).status_code == 200
        assert client.get(path, headers=auth_headers(customer["token"])).status_code == 200
        assert client.get(path, headers=auth_headers(stranger["token"])).status_code == 404

    def test_list_by_job(self, client, customer, performer, stranger, job, application):
        other = apply(client, stranger["token"], job["id"], price="2")
        path = f"/jobs/{job['id']}/applications"

        as_creator = client.get(path, headers=auth_headers(customer["token"])).json()
        as_performer = client.get(path, headers=auth_headers(performer["token"])).json()

        assert {a["id"] for a in as_creator} == {application["id"], other["id"]}
        assert [a["id"] for a in as_performer] == [application["id"]]

    def test_list_by_job_for_uninvolved_person(self, client, job, application):
        outsider = signup(client, "outsider")
        response = client.get(
            f"/jobs/{job['id']}/applications", headers=auth_headers(outsider["token"])
        )
        assert response.status_code == 200
        assert response.json() == []

    def test_my_applications_include_job_and_contract(
        self, client, customer, performer, job, application
    ):
        headers = auth_headers(performer["token"])

        mine = client.get("/applications/my", headers=headers).json()
        assert len(mine) == 1
        assert mine[0]["job_title"] == job["title"]
        assert mine[0]["job_budget"] == job["budget"]
        assert mine[0]["contract_id"] is None

        contract = create_contract(client, customer["token"], application, price="35")
        mine = client.get("/applications/my", headers=headers).json()
        assert mine[0]["contract_id"] == contract["id"]
        assert mine[0]["contract_status"] == "created"
        assert mine[0]["contract_price"] == "35"

        assert client.get("/applications", headers=headers).json() == mine

    def test_application_for_job(self, client, customer, performer, job, application):
        response = client.get(
            f"/jobs/{job['id']}/application", headers=auth_headers(performer["token"])
        )
        assert response.json()["id"] == application["id"]

        response = client.get(
            f"/jobs/{job['id']}/application", headers=auth_headers(customer["token"])
        )
        assert response.status_code == 200
        assert response.json() == {}


class TestApplicationChat:
    def test_chat_opened_with_comment(self, client, customer, performer, application):
        response = client.get(
            f"/applications/{application['id']}/chat", headers=auth_headers(customer["token"])
        )
        assert response.status_code == 200

        chat = response.json()
        assert chat["topic"] == f"urn:application:{application['id']}"
        assert {p["id"] for p in chat["participants"]} == {
            customer["subject"]["id"],
            performer["subject"]["id"],
        }
        assert [m["text"] for m in chat["messages"]] == ["I can do it"]
        assert chat["messages"][0]["created_by"] == performer["subject"]["id"]

    def test_chat_is_stable(self, client, performer, application):
        path = f"/applications/{application['id']}/chat"
        headers = auth_headers(performer["token"])
        assert client.get(path, headers=headers).json()["id"] == (
            client.get(path, headers=headers).json()["id"]
        )

    def test_chat_hidden_from_strangers(self, client, stranger, application):
        response = client.get(
            f"/applications/{application['id']}/chat", headers=auth_headers(stranger["token"])
        )
        assert response.status_code == 404


class TestChats:
    def _chat(self, client, token, application) -> dict:
        return client.get(
            f"/applications/{application['id']}/chat", headers=auth_headers(token)
        ).json()

    def test_post_and_read_in_order(self, client, customer, performer, application):
        chat = self._chat(client, customer["token"], application)

        for token, text in [
            (customer["token"], "When can you start?"),
            (performer["token"], "Tomorrow"),
            (customer["token"], "Great"),
        ]:
            response = client.post(
                f"/chats/{chat['id']}/messages", json={"text": text}, headers=auth_headers(token)
            )
            assert response.status_code == 201

        response = client.get(f"/chats/{chat['id']}", headers=auth_headers(performer["token"]))
        assert [m["text"] for m in response.json()["messages"]] == [
            "I can do it",
            "When can you start?",
            "Tomorrow",
            "Great",
        ]

    def test_message_is_trimmed(self, client, customer, application):
        chat = self._chat(client, customer["token"], application)
        response = client.post(
            f"/chats/{chat['id']}/messages",
            json={"text": "  hello  "},
            headers=auth_headers(customer["token"]),
        )
        message = response.json()
        assert message["text"] == "hello"
        assert message["author_name"] == "Customer"

    @pytest.mark.parametrize("text,message", [
        ("   ", "text: is required"),
        ("x" * 4097, "text: is too long"),
    ])
    def test_message_validation(self, client, customer, application, text, message):
        chat = self._chat(client, customer["token"], application)
        response = client.post(
            f"/chats/{chat['id']}/messages",
            json={"text": text},
            headers=auth_headers(customer["token"]),
        )
        assert response.status_code == 422
        assert response.json()["message"] == message

    def test_longest_message_accepted(self, client, customer, application):
        chat = self._chat(client, customer["token"], application)
        response = client.post(
            f"/chats/{chat['id']}/messages",
            json={"text": "ж" * 4096},
            headers=auth_headers(customer["token"]),
        )
        assert response.status_code == 201

    def test_outsider(self, client, customer, stranger, application):
        chat = self._chat(client, customer["token"], application)
        headers = auth_headers(stranger["token"])

        assert client.get(f"/chats/{chat['id']}", headers=headers).status_code == 404
        response = client.post(
            f"/chats/{chat['id']}/messages", json={"text": "let me in"}, headers=headers
        )
        assert response.status_code == 403

    def test_missing_chat(self, client, customer):
        response = client.post(
            "/chats/missing/messages", json={"text": "hi"}, headers=auth_headers(customer["token"])
        )
        assert response.status_code == 404

    def test_list_chats(self, client, customer, performer, job, application):
        response = client.get("/chats", headers=auth_headers(customer["token"]))
        assert response.status_code == 200

        chats = response.json()
        assert len(chats) == 1
        assert chats[0]["kind"] == "application"
        assert chats[0]["title"] == job["title"]
        assert chats[0]["job_id"] == job["id"]
        assert chats[0]["application_id"] == application["id"]
        assert chats[0]["contract_id"] is None

    def test_list_chats_of_uninvolved_person(self, client, application):
        outsider = signup(client, "outsider")
        assert client.get("/chats", headers=auth_headers(outsider["token"])).json() == []


def test_second_job_gets_its_own_chat(client, customer, performer):
    first = create_job(client, customer["token"], title="One")
    second = create_job(client, customer["token"], title="Two")
    a = apply(client, performer["token"], first["id"])
    b = apply(client, performer["token"], second["id"])

    headers = auth_headers(performer["token"])
    chat_a = client.get(f"/applications/{a['id']}/chat", headers=headers).json()
    chat_b = client.get(f"/applications/{b['id']}/chat", headers=headers).json()
    assert chat_a["id"] != chat_b["id"]
    assert len(client.get("/chats", headers=headers).json()) == 2
