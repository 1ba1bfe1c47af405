from datetime import datetime, timezone

import pytest

from app.messaging.wechat_sync import QUEUE_NAME, RetryPolicy, WechatSyncMessage
from app.schemas.wechat_sync import SyncWechatRequest


def _sync(**overrides) -> SyncWechatRequest:
    payload = {"publicAccountId": "acc-1", "articleLimit": 50}
    payload.update(overrides)
    return SyncWechatRequest.from_data(payload)


class TestSyncRequest:
    def test_defaults(self):
        dto = _sync()
        assert dto.validation_errors() == {}
        assert dto.sync_type == "all"
        assert dto.sync_scope == "recent"
        assert dto.run_async is True
        assert dto.priority == 5

    def test_async_key(self):
        assert _sync(**{"async": False}).run_async is False
        assert _sync().to_dict()["async"] is True

    def test_account_required(self):
        errors = SyncWechatRequest.from_data({"articleLimit": 5}).validation_errors()
        assert errors == {"publicAccountId": "Public account id must not be blank"}

    def test_recent_scope_needs_limit(self):
        errors = SyncWechatRequest.from_data({"publicAccountId": "acc-1"}).validation_errors()
        assert errors == {"recentRange": "A recent scope needs an article limit"}

    def test_custom_scope_needs_both_times(self):
        errors = _sync(syncScope="custom", syncStartTime="2024-01-01 00:00:00").validation_errors()
        assert errors == {"customRange": "A custom scope needs both a start time and an end time"}

    def test_time_range_order(self):
        errors = _sync(
            syncScope="custom", syncStartTime="2024-02-01 00:00:00", syncEndTime="2024-01-01 00:00:00"
        ).validation_errors()
        assert errors == {"timeRange": "Sync start time cannot be later than the end time"}

    @pytest.mark.parametrize(
        "field,value",
        [
            ("syncType", "everything"),
            ("syncScope", "yesterday"),
            ("duplicateAction", "merge"),
            ("priority", 11),
            ("articleLimit", 1001),
            ("callbackUrl", "not-a-url"),
        ],
    )
    def test_field_constraints(self, field, value):
        assert field in _sync(**{field: value}).validation_errors()

    def test_to_message(self):
        dto = _sync(forceSync=True, callbackUrl="https://hooks.example.com/done").add_custom_option("batch_size", 5)
        message = dto.to_message("task_1", created_by="admin")
        assert message.account_id == "acc-1"
        assert message.article_limit == 50
        assert message.priority == 8
        assert message.batch_size == 5
        assert message.callback_url == "https://hooks.example.com/done"
        assert message.created_by == "admin"
        assert message.custom_options["duplicate_action"] == "update"

    def test_to_message_default_limit(self):
        dto = SyncWechatRequest.from_data({"publicAccountId": "acc-1", "syncScope": "all"})
        assert dto.to_message("t").article_limit == 100

    def test_sync_summary(self):
        summary = _sync(syncStartTime="2024-01-01 00:00:00").sync_summary()
        assert summary["timeRange"] == {"start": "2024-01-01 00:00:00", "end": None}
        assert summary["hasValidData"] is True


class TestRetryPolicy:
    def test_defaults(self):
        assert RetryPolicy().to_dict() == {"max_retries": 3, "delay": 1000, "multiplier": 2, "max_delay": 30000}

    def test_backoff_is_capped(self):
        policy = RetryPolicy()
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1000, 2000, 4000]
        assert policy.delay_for(10) == 30000


class TestSyncMessage:
    def test_wire_format(self):
        message = WechatSyncMessage.create("t1", "acc", custom_options={"ttl": 60})
        assert message.to_dict() == {
            "task_id": "t1",
            "account_id": "acc",
            "sync_type": "articles",
            "sync_scope": "recent",
            "article_limit": 100,
            "force_sync": False,
            "custom_options": {"ttl": 60},
        }
        assert WechatSyncMessage.from_dict(message.to_dict()) == message

    def test_metadata(self):
        message = WechatSyncMessage.incremental_sync("t1", "acc")
        assert message.unique_id == "wechat_sync_acc_t1"
        assert message.queue_name == QUEUE_NAME
        assert message.priority == 5
        assert message.timeout == 600
        assert message.ttl == 3600
        assert message.process_media is True
        assert message.force_download is False

    def test_factories(self):
        full = WechatSyncMessage.full_sync("t", "acc")
        assert (full.sync_scope, full.article_limit, full.force_sync, full.priority) == ("all", 1000, True, 8)
        assert WechatSyncMessage.forced_sync("t", "acc", sync_scope="custom").force_sync

    def test_expiry_uses_ttl(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        message = WechatSyncMessage.create("t", "acc", custom_options={"ttl": 120})
        assert message.expires_at(now) == datetime(2024, 1, 1, 0, 2, tzinfo=timezone.utc)

    def test_validity(self):
        assert WechatSyncMessage.create("t", "acc").is_valid()
        assert not WechatSyncMessage.create("", "acc").is_valid()
        assert not WechatSyncMessage.create("t", "acc", article_limit=0).is_valid()

    def test_task_payload(self):
        payload = WechatSyncMessage.create("t", "acc", custom_options={"timeout": 30}).to_task_payload()
        assert payload["timeout"] == 30
        assert payload["batch_size"] == 20
        assert "task_id" not in payload
