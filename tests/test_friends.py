"""
친구 기능 테스트
"""


def _send(client, headers, friend_id, message=None):
    return client.post(
        "/api/friends/request",
        json={"friendId": friend_id, "message": message},
        headers=headers,
    )


def test_search_users_excludes_self(client, make_user):
    _, alice_headers = make_user("alice")
    make_user("alina", name="Alina")
    make_user("bob")

    response = client.get("/api/friends/search?query=al", headers=alice_headers)
    assert response.status_code == 200
    usernames = [u["username"] for u in response.json()["users"]]
    assert usernames == ["alina"]


def test_search_requires_two_characters(client, make_user):
    _, headers = make_user("alice")

    assert client.get("/api/friends/search?query=a", headers=headers).status_code == 400
    assert client.get("/api/friends/search", headers=headers).status_code == 400


def test_search_treats_wildcards_literally(client, make_user):
    _, headers = make_user("alice")
    make_user("bob")

    response = client.get("/api/friends/search?query=%25%25", headers=headers)
    assert response.status_code == 200
    assert response.json()["users"] == []


def test_request_accept_and_list(client, make_user):
    alice, alice_headers = make_user("alice")
    bob, bob_headers = make_user("bob")

    sent = _send(client, alice_headers, bob["id"], "hi bob")
    assert sent.status_code == 200
    assert sent.json()["message"] == "Friend request sent"

    pending = client.get("/api/friends/requests", headers=bob_headers).json()["requests"]
    assert len(pending) == 1
    assert pending[0]["requester"]["username"] == "alice"
    assert pending[0]["message"] == "hi bob"
    assert pending[0]["status"] == "PENDING"

    # 보낸 쪽에는 받은 요청이 없음
    assert client.get("/api/friends/requests", headers=alice_headers).json()["requests"] == []

    accepted = client.post(
        "/api/friends/accept", json={"requestId": sent.json()["requestId"]}, headers=bob_headers
    )
    assert accepted.status_code == 200
    assert accepted.json()["friend"]["userId"] == alice["id"]

    alice_friends = client.get("/api/friends", headers=alice_headers).json()["friends"]
    bob_friends = client.get("/api/friends", headers=bob_headers).json()["friends"]
    assert [f["username"] for f in alice_friends] == ["bob"]
    assert [f["username"] for f in bob_friends] == ["alice"]
    assert client.get("/api/friends/requests", headers=bob_headers).json()["requests"] == []


def test_request_rules(client, make_user, make_friends):
    alice, alice_headers = make_user("alice")
    bob, bob_headers = make_user("bob")
    carol, carol_headers = make_user("carol")

    to_self = _send(client, alice_headers, alice["id"])
    assert to_self.status_code == 400
    assert to_self.json()["detail"] == "Cannot send friend request to yourself"

    assert _send(client, alice_headers, 9999).status_code == 404

    assert _send(client, alice_headers, bob["id"]).status_code == 200
    duplicate = _send(client, alice_headers, bob["id"])
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Friend request already exists"

    # 반대 방향도 대기 중인 요청으로 간주
    reverse = _send(client, bob_headers, alice["id"])
    assert reverse.status_code == 400

    make_friends(alice, alice_headers, carol, carol_headers)
    already = _send(client, carol_headers, alice["id"])
    assert already.status_code == 400
    assert already.json()["detail"] == "Already friends with this user"


def test_only_recipient_can_accept_or_decline(client, make_user):
    alice, alice_headers = make_user("alice")
    bob, bob_headers = make_user("bob")
    _, carol_headers = make_user("carol")

    request_id = _send(client, alice_headers, bob["id"]).json()["requestId"]

    forbidden = client.post("/api/friends/accept", json={"requestId": request_id}, headers=carol_headers)
    assert forbidden.status_code == 403

    own = client.post("/api/friends/decline", json={"requestId": request_id}, headers=alice_headers)
    assert own.status_code == 403

    missing = client.post("/api/friends/accept", json={"requestId": 9999}, headers=bob_headers)
    assert missing.status_code == 404

    declined = client.post("/api/friends/decline", json={"requestId": request_id}, headers=bob_headers)
    assert declined.status_code == 200
    assert declined.json()["message"] == "Friend request declined"

    not_pending = client.post("/api/friends/accept", json={"requestId": request_id}, headers=bob_headers)
    assert not_pending.status_code == 400
    assert not_pending.json()["detail"] == "Request is not pending"

    assert client.get("/api/friends", headers=bob_headers).json()["friends"] == []


def test_request_again_after_decline(client, make_user):
    alice, alice_headers = make_user("alice")
    bob, bob_headers = make_user("bob")

    first_id = _send(client, alice_headers, bob["id"]).json()["requestId"]
    client.post("/api/friends/decline", json={"requestId": first_id}, headers=bob_headers)

    again = _send(client, alice_headers, bob["id"], "second try")
    assert again.status_code == 200
    assert again.json()["requestId"] == first_id

    pending = client.get("/api/friends/requests", headers=bob_headers).json()["requests"]
    assert [r["message"] for r in pending] == ["second try"]


def test_reopened_request_is_listed_first(client, make_user):
    alice, alice_headers = make_user("alice")
    bob, bob_headers = make_user("bob")
    carol, carol_headers = make_user("carol")

    first_id = _send(client, alice_headers, bob["id"]).json()["requestId"]
    client.post("/api/friends/decline", json={"requestId": first_id}, headers=bob_headers)
    _send(client, carol_headers, bob["id"])

    _send(client, alice_headers, bob["id"], "once more")

    pending = client.get("/api/friends/requests", headers=bob_headers).json()["requests"]
    assert [r["requester"]["username"] for r in pending] == ["alice", "carol"]


def test_remove_friend(client, make_user, make_friends):
    alice, alice_headers = make_user("alice")
    bob, bob_headers = make_user("bob")
    make_friends(alice, alice_headers, bob, bob_headers)

    response = client.delete(f"/api/friends/{bob['id']}", headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Friend removed successfully"

    assert client.get("/api/friends", headers=alice_headers).json()["friends"] == []
    assert client.get("/api/friends", headers=bob_headers).json()["friends"] == []

    # 삭제 후 다시 친구 요청 가능
    assert _send(client, bob_headers, alice["id"]).status_code == 200

    assert client.delete("/api/friends/9999", headers=alice_headers).status_code == 404
