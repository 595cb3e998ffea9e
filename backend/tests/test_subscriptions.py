from authorhaven.subscriptions import service as subscription_service
from authorhaven.subscriptions.models import SubscriptionKind


async def _article(client, headers):
    res = await client.post("/articles", json={"title": "Follow This", "body": "text"}, headers=headers)
    return res.json()["article"]["slug"]


async def test_subscribe_to_author(client, db, make_user):
    author, _ = await make_user(username="writer")
    reader, headers = await make_user(username="reader")

    res = await client.post("/subscribe/writer", headers=headers)
    assert res.status_code == 200
    assert res.json() == {"status": 200, "message": "successfully subscribed"}

    subscribers = await subscription_service.get_subscribers(db, SubscriptionKind.AUTHOR, author.id)
    assert subscribers == [reader.id]


async def test_subscribe_to_article(client, db, make_user):
    _, author_headers = await make_user(username="writer")
    reader, headers = await make_user(username="reader")
    slug = await _article(client, author_headers)

    res = await client.post(f"/subscribe/{slug}", headers=headers)
    assert res.status_code == 200

    kind, target_id = await subscription_service.resolve_target(db, slug)
    assert kind == SubscriptionKind.ARTICLE
    assert await subscription_service.get_subscribers(db, kind, target_id) == [reader.id]


async def test_subscribe_twice_is_rejected(client, make_user):
    await make_user(username="writer")
    _, headers = await make_user(username="reader")
    await client.post("/subscribe/writer", headers=headers)

    res = await client.post("/subscribe/writer", headers=headers)
    assert res.status_code == 400
    assert res.json()["message"] == "you are already a subscriber"


async def test_subscribe_unknown_target(client, make_user):
    _, headers = await make_user()
    res = await client.post("/subscribe/ghost", headers=headers)
    assert res.status_code == 404
    assert res.json()["message"] == "resource not found"


async def test_unsubscribe(client, db, make_user):
    author, _ = await make_user(username="writer")
    _, headers = await make_user(username="reader")
    await client.post("/subscribe/writer", headers=headers)

    res = await client.post("/unsubscribe/writer", headers=headers)
    assert res.status_code == 200
    assert res.json()["message"] == "successfully unsubscribed"
    assert await subscription_service.get_subscribers(db, SubscriptionKind.AUTHOR, author.id) == []


async def test_unsubscribe_when_not_a_subscriber(client, make_user):
    await make_user(username="writer")
    _, first = await make_user(username="first")
    _, second = await make_user(username="second")
    await client.post("/subscribe/writer", headers=first)

    res = await client.post("/unsubscribe/writer", headers=second)
    assert res.status_code == 400
    assert res.json()["message"] == "you are not a subscriber"


async def test_unsubscribe_without_any_subscribers(client, make_user):
    await make_user(username="writer")
    _, headers = await make_user(username="reader")
    res = await client.post("/unsubscribe/writer", headers=headers)
    assert res.status_code == 400
    assert res.json()["message"] == "resource not found"


async def test_subscribe_requires_login(client, make_user):
    await make_user(username="writer")
    res = await client.post("/subscribe/writer")
    assert res.status_code == 401


async def test_unsubscribe_unknown_target(client, make_user):
    _, headers = await make_user()
    res = await client.post("/unsubscribe/ghost", headers=headers)
    assert res.status_code == 400
    assert res.json() == {"status": 400, "message": "resource not found"}
