"""End-to-end tests against the real app and a throwaway SQLite database."""

import uuid

import pytest

APP_SECRET = "0123456789abcdef0123456789abcdef"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"


def _unique(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _app_id() -> str:
    return "wx" + uuid.uuid4().hex[:16]


@pytest.fixture
def category(client):
    resp = client.post("/api/v1/categories", json={"code": _unique("cat"), "name": "News"})
    assert resp.status_code == 201
    return resp.json()["data"]


@pytest.fixture
def article(client, category):
    resp = client.post(
        "/api/v1/articles",
        json={
            "name": "Launch day",
            "cover": "https://cdn.example.com/cover.png",
            "content": "We shipped.",
            "categoryCode": category["code"],
        },
    )
    assert resp.status_code == 201
    return resp.json()["data"]


@pytest.fixture
def account(client):
    resp = client.post(
        "/api/v1/wechat/accounts",
        json={"name": "Newsroom", "appId": _app_id(), "appSecret": APP_SECRET},
    )
    assert resp.status_code == 201
    return resp.json()["data"]


class TestPlumbing:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_preflight(self, client):
        resp = client.options("/api/v1/articles", headers={"Origin": "https://admin.example.com"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_cors_headers_on_responses(self, client):
        assert client.get("/api/v1/categories").headers["access-control-allow-credentials"] == "false"


class TestCategories:
    def test_create_and_get(self, client, category):
        body = client.get(f"/api/v1/categories/{category['id']}").json()
        assert body["status"] == "200"
        assert body["path"] == f"/api/v1/categories/{category['id']}"
        assert body["data"]["code"] == category["code"]

    def test_duplicate_code(self, client, category):
        resp = client.post("/api/v1/categories", json={"code": category["code"], "name": "Again"})
        assert resp.status_code == 409

    def test_validation_errors(self, client):
        resp = client.post("/api/v1/categories", json={"code": "", "name": None})
        assert resp.status_code == 400
        assert set(resp.json()["errors"]) == {"code", "name"}

    @pytest.mark.parametrize("method", ["put", "patch"])
    def test_update(self, client, category, method):
        resp = getattr(client, method)(f"/api/v1/categories/{category['id']}", json={"name": "World"})
        assert resp.status_code == 200
        assert resp.json()["data"]["name"] == "World"

    def test_update_without_fields(self, client, category):
        resp = client.put(f"/api/v1/categories/{category['id']}", json={"name": ""})
        assert resp.json()["errors"] == {"noUpdates": "No fields to update were provided"}

    def test_missing(self, client):
        resp = client.get("/api/v1/categories/999999")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Category '999999' not found"

    def test_delete_referenced_category_conflicts(self, client, category, article):
        resp = client.delete(f"/api/v1/categories/{category['id']}")
        assert resp.status_code == 409
        assert resp.json()["message"].startswith("Cannot delete")

    def test_delete(self, client, category):
        assert client.delete(f"/api/v1/categories/{category['id']}").status_code == 200
        assert client.get(f"/api/v1/categories/{category['id']}").status_code == 404

    def test_pagination(self, client, category):
        client.post("/api/v1/categories", json={"code": _unique("cat"), "name": "More"})
        data = client.get("/api/v1/categories", params={"limit": 1, "page": 2}).json()["data"]
        assert data["limit"] == 1
        assert data["page"] == 2
        assert len(data["items"]) == 1
        assert data["pages"] == data["total"]


class TestArticles:
    def test_created_article(self, article, category):
        assert article["status"] == 1
        assert article["statusDescription"] == "Published"
        assert article["categoryId"] == category["id"]
        assert article["viewCount"] == 0
        assert article["formattedViewCount"] == "0"

    def test_unknown_category(self, client):
        resp = client.post(
            "/api/v1/articles",
            json={"name": "A", "cover": "https://x.example.com/a.png", "content": "c", "categoryCode": "nope"},
        )
        assert resp.status_code == 404

    def test_type_errors_are_400(self, client):
        resp = client.post("/api/v1/articles", json={"status": "not-a-number"})
        assert resp.status_code == 400
        assert "status" in resp.json()["errors"]

    def test_missing_article(self, client):
        resp = client.get("/api/v1/articles/999999")
        assert resp.status_code == 404
        assert resp.json()["message"] == "News article not found"

    def test_update(self, client, article):
        resp = client.put(f"/api/v1/articles/{article['id']}", json={"name": "Renamed", "isRecommend": True})
        data = resp.json()["data"]
        assert data["name"] == "Renamed"
        assert data["isRecommend"] is True
        assert data["cover"] == article["cover"]

    def test_soft_delete_and_restore(self, client, article, category):
        article_id = article["id"]
        assert client.delete(f"/api/v1/articles/{article_id}").json()["data"]["status"] == 3

        listed = client.get("/api/v1/articles", params={"categoryId": category["id"]}).json()["data"]
        assert article_id not in [a["id"] for a in listed["items"]]
        deleted = client.get("/api/v1/articles", params={"categoryId": category["id"], "status": 3}).json()["data"]
        assert [a["id"] for a in deleted["items"]] == [article_id]

        restored = client.patch(f"/api/v1/articles/{article_id}/restore").json()["data"]
        assert restored["status"] == 1

    def test_deleted_article_is_unavailable(self, client, article):
        url = f"/api/v1/articles/{article['id']}"
        client.delete(url)

        resp = client.get(url)
        assert resp.status_code == 404
        assert resp.json()["message"] == "News article has been deleted"
        assert client.put(url, json={"name": "zombie"}).status_code == 404
        assert client.delete(url).status_code == 404
        assert client.patch(f"{url}/status", json={"status": 1}).status_code == 404

        assert client.patch(f"{url}/restore").json()["data"]["status"] == 1
        assert client.get(url).json()["data"]["name"] == article["name"]

    def test_activation_stamps_release_time(self, client, category):
        pending = client.post(
            "/api/v1/articles",
            json={
                "name": "Embargoed",
                "cover": "https://cdn.example.com/e.png",
                "content": "Later",
                "categoryCode": category["code"],
                "status": 2,
                "releaseTime": "2099-01-01 00:00:00",
            },
        ).json()["data"]
        assert pending["releaseTime"].startswith("2099")

        client.patch(f"/api/v1/articles/{pending['id']}/status", json={"status": 1})
        activated = client.get(f"/api/v1/articles/{pending['id']}").json()["data"]
        assert activated["status"] == 1
        assert not activated["releaseTime"].startswith("2099")

    def test_batch_status_skips_deleted_and_missing(self, client, article, category):
        gone = client.post(
            "/api/v1/articles",
            json={
                "name": "Gone",
                "cover": "https://cdn.example.com/g.png",
                "content": "Removed",
                "categoryCode": category["code"],
            },
        ).json()["data"]
        client.delete(f"/api/v1/articles/{gone['id']}")

        resp = client.patch(
            f"/api/v1/articles/{article['id']}/status",
            json={"status": 2, "articleIds": [article["id"], gone["id"], 999999]},
        )
        data = resp.json()["data"]
        assert resp.status_code == 200
        assert data["updated"] == [article["id"]]
        assert data["articleCount"] == 1
        assert len(data["errors"]) == 2

        only_deleted = client.patch(
            f"/api/v1/articles/{article['id']}/status",
            json={"status": 2, "articleIds": [gone["id"]]},
        )
        assert only_deleted.status_code == 400

    def test_category_field_takes_precedence(self, client, category):
        other = client.post("/api/v1/categories", json={"code": _unique("cat"), "name": "Sport"}).json()["data"]
        payload = {
            "name": "Derby",
            "cover": "https://cdn.example.com/d.png",
            "content": "Match report",
            "categoryCode": category["code"],
        }

        by_object = client.post("/api/v1/articles", json={**payload, "category": {"id": other["id"]}})
        assert by_object.status_code == 201
        assert by_object.json()["data"]["categoryId"] == other["id"]

        by_numeric_string = client.post("/api/v1/articles", json={**payload, "category": str(other["id"])})
        assert by_numeric_string.json()["data"]["categoryId"] == other["id"]

        article_id = by_object.json()["data"]["id"]
        moved = client.put(f"/api/v1/articles/{article_id}", json={"category": category["code"]})
        assert moved.json()["data"]["categoryId"] == category["id"]

        unknown = client.post("/api/v1/articles", json={**payload, "category": {"id": 999999}})
        assert unknown.status_code == 404

    def test_restore_requires_deleted(self, client, article):
        assert client.patch(f"/api/v1/articles/{article['id']}/restore").status_code == 400

    def test_batch_status(self, client, article, category):
        other = client.post(
            "/api/v1/articles",
            json={
                "name": "Second",
                "cover": "https://cdn.example.com/2.png",
                "content": "More",
                "categoryCode": category["code"],
            },
        ).json()["data"]
        resp = client.patch(
            f"/api/v1/articles/{article['id']}/status",
            json={"status": 2, "articleIds": [article["id"], other["id"]]},
        )
        data = resp.json()["data"]
        assert data["articleCount"] == 2
        assert client.get(f"/api/v1/articles/{other['id']}").json()["data"]["status"] == 2

    def test_status_business_rule(self, client, article):
        resp = client.patch(f"/api/v1/articles/{article['id']}/status", json={"status": 3})
        assert resp.status_code == 400
        assert "reason" in resp.json()["errors"]

    def test_keyword_and_sort(self, client, article, category):
        resp = client.get(
            "/api/v1/articles",
            params={"keyword": "shipped", "categoryId": category["id"], "sort": "viewCount:desc,bogus:asc"},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["total"] == 1


class TestReadLogs:
    def test_record_and_statistics(self, client, article):
        resp = client.post(
            "/api/v1/article-reads",
            json={"articleId": article["id"], "sessionId": "s-1", "durationSeconds": 125},
            headers={"User-Agent": IPHONE_UA},
        )
        assert resp.status_code == 201
        log = resp.json()["data"]
        assert log["deviceType"] == "mobile"
        assert log["formattedDuration"] == "2m 5s"
        assert log["userAgent"] == IPHONE_UA

        stats = client.get("/api/v1/article-reads/statistics", params={"articleId": article["id"]}).json()["data"]
        assert stats["totalReads"] == 1
        assert stats["byDevice"] == {"mobile": 1}
        assert client.get(f"/api/v1/articles/{article['id']}").json()["data"]["viewCount"] == 1

    def test_unidentified_reader(self, client, article):
        resp = client.post("/api/v1/article-reads", json={"articleId": article["id"]})
        assert resp.status_code == 400
        assert "identification" in resp.json()["errors"]

    def test_deleted_article(self, client, article):
        client.delete(f"/api/v1/articles/{article['id']}")
        resp = client.post("/api/v1/article-reads", json={"articleId": article["id"], "userId": 1})
        assert resp.status_code == 400

    def test_batch_partial_success(self, client, article):
        resp = client.post(
            "/api/v1/article-reads/batch",
            json={
                "readLogs": [
                    {"articleId": article["id"], "userId": 5},
                    {"articleId": 999999, "userId": 5},
                    {"articleId": 0, "userId": 5},
                    {"articleId": "abc", "userId": 5},
                ]
            },
        )
        data = resp.json()["data"]
        assert resp.status_code == 200
        assert data["successCount"] == 1
        assert data["failedCount"] == 3
        assert set(data["errors"]) == {"1", "2", "3"}
        assert "articleId" in data["errors"]["3"]

    def test_cleanup(self, client):
        resp = client.post("/api/v1/article-reads/cleanup", json={"beforeDate": "2020-01-01"})
        assert resp.json()["data"] == {"deletedCount": 0, "beforeDate": "2020-01-01"}
        assert client.post("/api/v1/article-reads/cleanup", json={}).status_code == 400


class TestWechatAccounts:
    def test_secrets_masked(self, client, account):
        assert account["appSecret"] == "01234567****"
        fetched = client.get(f"/api/v1/wechat/accounts/{account['id']}").json()["data"]
        assert fetched["appSecret"] == "01234567****"
        assert fetched["isActive"] is True

    def test_duplicate_app_id(self, client, account):
        resp = client.post(
            "/api/v1/wechat/accounts",
            json={"name": "Copy", "appId": account["appId"], "appSecret": APP_SECRET},
        )
        assert resp.status_code == 409

    def test_deactivate_and_filter(self, client, account):
        resp = client.patch(f"/api/v1/wechat/accounts/{account['id']}/deactivate")
        assert resp.json()["data"]["isActive"] is False
        inactive = client.get("/api/v1/wechat/accounts", params={"isActive": False, "limit": 100}).json()["data"]
        assert account["id"] in [a["id"] for a in inactive["items"]]

    def test_update_encryption_pair(self, client, account):
        resp = client.patch(
            f"/api/v1/wechat/accounts/{account['id']}",
            json={"token": "tok_1", "encodingAESKey": "B" * 43},
        )
        data = resp.json()["data"]
        assert data["hasEncryption"] is True
        assert data["encodingAESKey"] == "BBBBBBBB****"

    def test_delete(self, client, account):
        assert client.delete(f"/api/v1/wechat/accounts/{account['id']}").status_code == 200
        assert client.get(f"/api/v1/wechat/accounts/{account['id']}").status_code == 404


class TestWechatSync:
    def test_queue_sync(self, client, account):
        resp = client.post("/api/v1/wechat/sync", json={"publicAccountId": account["id"], "articleLimit": 10})
        assert resp.status_code == 202
        body = resp.json()
        assert body["status"] == "202"
        data = body["data"]
        assert data["queueName"] == "wechat_sync"
        assert data["priority"] == 5
        assert data["async"] is True
        assert data["uniqueId"] == f"wechat_sync_{account['id']}_{data['taskId']}"
        assert data["retryPolicy"]["max_retries"] == 3
        assert data["message"]["article_limit"] == 10

    def test_forced_sync_priority(self, client, account):
        resp = client.post(
            "/api/v1/wechat/sync",
            json={"publicAccountId": account["id"], "syncScope": "all", "forceSync": True},
        )
        assert resp.json()["data"]["priority"] == 8

    def test_unknown_account(self, client):
        resp = client.post("/api/v1/wechat/sync", json={"publicAccountId": "missing", "articleLimit": 10})
        assert resp.status_code == 404

    def test_inactive_account(self, client, account):
        client.patch(f"/api/v1/wechat/accounts/{account['id']}/deactivate")
        resp = client.post("/api/v1/wechat/sync", json={"publicAccountId": account["id"], "articleLimit": 10})
        assert resp.status_code == 400

    def test_invalid_request(self, client):
        resp = client.post("/api/v1/wechat/sync", json={"publicAccountId": "x"})
        assert resp.json()["errors"] == {"recentRange": "A recent scope needs an article limit"}
