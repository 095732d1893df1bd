import pytest

from chat_api import crud
from chat_api.crud.friends import FriendsCRUD
from chat_api.exceptions import AlreadyFriends, AlreadyRequested, NotFound, ValidationFailed
from chat_api.models import FriendRequest, Friendship


def _assert_friends(a, b):
    assert b.id in a.friend_ids and a.id in b.friend_ids
    assert b.id not in a.pending_outgoing_ids and a.id not in a.pending_incoming_ids
    assert a.id not in b.pending_incoming_ids and a.id not in b.pending_outgoing_ids


def test_send_request_updates_both_pending_sets(db, make_user):
    alice, bob = make_user(), make_user()

    FriendsCRUD.send_friend_request(db, alice.id, bob.id)

    db.expire_all()
    assert alice.pending_outgoing_ids == {bob.id}
    assert bob.pending_incoming_ids == {alice.id}
    assert alice.pending_incoming_ids == set()
    assert bob.pending_outgoing_ids == set()


def test_send_request_twice_is_rejected(db, make_user):
    alice, bob = make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)

    with pytest.raises(AlreadyRequested):
        FriendsCRUD.send_friend_request(db, alice.id, bob.id)


def test_send_request_against_pending_reverse_request_is_rejected(db, make_user):
    alice, bob = make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)

    with pytest.raises(AlreadyRequested):
        FriendsCRUD.send_friend_request(db, bob.id, alice.id)


@pytest.mark.parametrize("reverse", [False, True])
def test_send_request_to_friend_is_rejected(db, make_user, reverse):
    alice, bob = make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)
    FriendsCRUD.accept_friend_request(db, alice.id, bob.id)

    sender, recipient = (bob, alice) if reverse else (alice, bob)
    with pytest.raises(AlreadyFriends):
        FriendsCRUD.send_friend_request(db, sender.id, recipient.id)


def test_send_request_to_self_is_rejected(db, make_user):
    alice = make_user()

    with pytest.raises(ValidationFailed):
        FriendsCRUD.send_friend_request(db, alice.id, alice.id)


def test_send_request_unknown_user(db, make_user):
    alice = make_user()

    with pytest.raises(NotFound):
        FriendsCRUD.send_friend_request(db, alice.id, "missing")
    with pytest.raises(NotFound):
        FriendsCRUD.send_friend_request(db, "missing", alice.id)


def test_accept_makes_symmetric_friendship(db, make_user):
    alice, bob = make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)

    friendship = FriendsCRUD.accept_friend_request(db, alice.id, bob.id)

    assert {friendship.user1_id, friendship.user2_id} == {alice.id, bob.id}
    assert friendship.user1_id < friendship.user2_id
    db.expire_all()
    _assert_friends(alice, bob)
    assert db.query(FriendRequest).count() == 0


def test_accept_clears_crossing_request(db, make_user):
    alice, bob = make_user(), make_user()
    # Crossing requests can only come from before both-direction checks existed
    db.add_all([
        FriendRequest(requester_id=alice.id, recipient_id=bob.id),
        FriendRequest(requester_id=bob.id, recipient_id=alice.id),
    ])
    db.commit()

    FriendsCRUD.accept_friend_request(db, alice.id, bob.id)

    db.expire_all()
    _assert_friends(alice, bob)
    assert db.query(FriendRequest).count() == 0


def test_accept_twice_is_idempotent(db, make_user):
    alice, bob = make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)
    first = FriendsCRUD.accept_friend_request(db, alice.id, bob.id)

    second = FriendsCRUD.accept_friend_request(db, alice.id, bob.id)

    assert second.id == first.id
    assert db.query(Friendship).count() == 1


def test_accept_without_request_is_not_found(db, make_user):
    alice, bob = make_user(), make_user()

    with pytest.raises(NotFound):
        FriendsCRUD.accept_friend_request(db, alice.id, bob.id)


def test_accept_unknown_user(db, make_user):
    alice = make_user()

    with pytest.raises(NotFound):
        FriendsCRUD.accept_friend_request(db, "missing", alice.id)


def test_update_friend_lists_is_idempotent(db, make_user):
    alice, bob = make_user(), make_user()
    mutation = crud.FriendListMutation(add_outgoing={bob.id})

    crud.update_friend_lists(db, alice.id, mutation)
    crud.update_friend_lists(db, alice.id, mutation)
    db.commit()

    assert db.query(FriendRequest).count() == 1
    db.expire_all()
    assert bob.pending_incoming_ids == {alice.id}

    crud.update_friend_lists(db, bob.id, crud.FriendListMutation(remove_incoming={alice.id}, add_friends={alice.id}))
    crud.update_friend_lists(db, bob.id, crud.FriendListMutation(remove_incoming={alice.id}, add_friends={alice.id}))
    db.commit()

    db.expire_all()
    _assert_friends(alice, bob)


def test_other_users_flags_match_relationship_sets(db, make_user):
    alice, bob, carol, dave = make_user(), make_user(), make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)
    FriendsCRUD.send_friend_request(db, alice.id, carol.id)
    FriendsCRUD.accept_friend_request(db, alice.id, carol.id)
    FriendsCRUD.send_friend_request(db, dave.id, alice.id)

    rows = FriendsCRUD.get_other_users_with_status(db, alice.id)

    flags = {user.id: (pending, friend) for user, pending, friend in rows}
    assert alice.id not in flags
    assert flags == {
        bob.id: (True, False),
        carol.id: (False, True),
        # Incoming requests do not count as pending for the viewer
        dave.id: (False, False),
    }


def test_reconcile_removes_requests_between_friends(db, make_user):
    alice, bob, carol = make_user(), make_user(), make_user()
    FriendsCRUD.send_friend_request(db, alice.id, bob.id)
    FriendsCRUD.accept_friend_request(db, alice.id, bob.id)
    FriendsCRUD.send_friend_request(db, alice.id, carol.id)
    # Leftover from a half-applied write
    db.add(FriendRequest(requester_id=bob.id, recipient_id=alice.id))
    db.commit()

    removed = FriendsCRUD.reconcile_friend_state(db)

    assert removed == 1
    remaining = db.query(FriendRequest).all()
    assert [(r.requester_id, r.recipient_id) for r in remaining] == [(alice.id, carol.id)]


def test_friend_request_flow_over_http(client, register_user):
    alice = register_user("Alice", "alice@example.com", "secret1")
    bob = register_user("Bob", "bob@example.com", "secret2")

    response = client.post("/friend-request", json={"senderId": alice["id"], "recipientId": bob["id"]})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Friend request sent successfully"}

    incoming = client.get(f"/friend-request/{bob['id']}").json()
    assert [u["id"] for u in incoming] == [alice["id"]]
    assert incoming[0]["name"] == "Alice"
    assert incoming[0]["email"] == "alice@example.com"
    sent = client.get(f"/friend-requests/sent/{alice['id']}").json()
    assert [u["id"] for u in sent] == [bob["id"]]

    others = client.get(f"/users/{alice['id']}").json()
    assert others == [{
        "id": bob["id"], "name": "Bob", "email": "bob@example.com", "image": None,
        "has_pending_request": True, "is_friend": False,
    }]

    response = client.post("/friend-request/accept", json={"senderId": alice["id"], "recipientId": bob["id"]})
    assert response.status_code == 200

    assert client.get(f"/friends/{alice['id']}").json() == [bob["id"]]
    assert client.get(f"/friends/{bob['id']}").json() == [alice["id"]]
    assert client.get(f"/friend-request/{bob['id']}").json() == []
    assert client.get(f"/friend-requests/sent/{alice['id']}").json() == []
    accepted = client.get(f"/accepted-friends/{bob['id']}").json()
    assert [u["email"] for u in accepted] == ["alice@example.com"]
    others = client.get(f"/users/{alice['id']}").json()
    assert others[0]["is_friend"] is True
    assert others[0]["has_pending_request"] is False


def test_friend_request_errors_over_http(client, register_user):
    alice = register_user("Alice", "alice@example.com", "secret1")
    bob = register_user("Bob", "bob@example.com", "secret2")
    pair = {"sender_id": alice["id"], "recipient_id": bob["id"]}

    assert client.post("/friend-request", json=pair).status_code == 200
    response = client.post("/friend-request", json=pair)
    assert response.status_code == 400
    assert response.json()["detail"] == "Friend request already sent"

    client.post("/friend-request/accept", json=pair)
    response = client.post("/friend-request", json=pair)
    assert response.status_code == 400
    assert response.json()["detail"] == "Already friends"

    missing = {"senderId": alice["id"], "recipientId": "nope"}
    assert client.post("/friend-request", json=missing).status_code == 404
    assert client.post("/friend-request/accept", json=missing).status_code == 404
    assert client.post("/friend-request", json={"senderId": alice["id"]}).status_code == 400


def test_accept_accepts_legacy_recipient_field(client, register_user):
    alice = register_user("Alice", "alice@example.com", "secret1")
    bob = register_user("Bob", "bob@example.com", "secret2")
    client.post("/friend-request", json={"senderId": alice["id"], "recipientId": bob["id"]})

    response = client.post("/friend-request/accept", json={"senderId": alice["id"], "recepientId": bob["id"]})

    assert response.status_code == 200
    assert client.get(f"/friends/{bob['id']}").json() == [alice["id"]]


def test_friends_with_details_includes_last_seen(client, register_user):
    alice = register_user("Alice", "alice@example.com", "secret1")
    bob = register_user("Bob", "bob@example.com", "secret2")
    client.post("/friend-request", json={"senderId": alice["id"], "recipientId": bob["id"]})
    client.post("/friend-request/accept", json={"senderId": alice["id"], "recipientId": bob["id"]})
    client.post("/login", json={"email": "alice@example.com", "password": "secret1"})

    details = client.get(f"/friends-with-details/{bob['id']}").json()

    assert len(details) == 1
    assert details[0]["id"] == alice["id"]
    assert details[0]["last_seen"] is not None


@pytest.mark.parametrize("path", [
    "/users/{}", "/friend-request/{}", "/friend-requests/sent/{}",
    "/accepted-friends/{}", "/friends/{}", "/friends-with-details/{}",
])
def test_listings_for_unknown_user_are_not_found(client, path):
    response = client.get(path.format("missing"))

    assert response.status_code == 404
