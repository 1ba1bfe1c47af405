from datetime import datetime

from app.schemas.wechat_account import (
    KEY_WITHOUT_TOKEN,
    TOKEN_WITHOUT_KEY,
    CreateWechatAccountRequest,
    UpdateWechatAccountRequest,
    WechatAccountOut,
    mask_secret,
)

APP_ID = "wx0123456789abcdef"
APP_SECRET = "0123456789abcdef0123456789abcdef"
AES_KEY = "A" * 43


def _create(**overrides) -> CreateWechatAccountRequest:
    payload = {"name": "Newsroom", "appId": APP_ID, "appSecret": APP_SECRET}
    payload.update(overrides)
    return CreateWechatAccountRequest.from_data(payload)


class TestCreateAccount:
    def test_valid(self):
        dto = _create()
        assert dto.validation_errors() == {}
        assert dto.is_active is True
        assert not dto.is_message_encryption_enabled()

    def test_required(self):
        errors = CreateWechatAccountRequest.from_data({}).validation_errors()
        assert {"name", "appId", "appSecret"} <= set(errors)

    def test_app_id_format(self):
        assert _create(appId="wx123").validation_errors()["appId"].startswith("AppId must start with wx")

    def test_app_secret_format(self):
        assert "appSecret" in _create(appSecret="XYZ").validation_errors()

    def test_encryption_pair(self):
        assert _create(token="tok_1", encodingAESKey=AES_KEY).validation_errors() == {}
        assert _create(token="tok_1", encodingAESKey=AES_KEY).is_message_encryption_enabled()
        assert _create(token="tok_1").validation_errors() == {"encryption": TOKEN_WITHOUT_KEY}
        assert _create(encodingAESKey=AES_KEY).validation_errors() == {"encryption": KEY_WITHOUT_TOKEN}

    def test_aes_key_length(self):
        errors = _create(token="tok", encodingAESKey="short").validation_errors()
        assert "encodingAESKey" in errors

    def test_avatar_url(self):
        assert "avatarUrl" in _create(avatarUrl="avatar.png").validation_errors()

    def test_safe_data_masks_secrets(self):
        data = _create(token="tok_1", encodingAESKey=AES_KEY).safe_data()
        assert data["appSecret"] == "01234567****"
        assert data["encodingAESKey"] == "AAAAAAAA****"
        assert data["appId"] == APP_ID
        assert data["encryptionStatusDescription"] == "Message encryption enabled"


class TestUpdateAccount:
    def test_no_updates(self):
        assert UpdateWechatAccountRequest.from_data({}).validation_errors() == {
            "noUpdates": "No fields to update were provided"
        }

    def test_lone_token_is_allowed(self):
        dto = UpdateWechatAccountRequest.from_data({"token": "tok_2"})
        assert dto.validation_errors() == {}

    def test_pair_checked_when_both_supplied(self):
        dto = UpdateWechatAccountRequest.from_data({"token": "tok_2", "encodingAESKey": ""})
        assert dto.validation_errors() == {"encryption": TOKEN_WITHOUT_KEY}

    def test_supplied_fields_checked(self):
        errors = UpdateWechatAccountRequest.from_data({"appId": "bad"}).validation_errors()
        assert set(errors) == {"appId"}

    def test_sensitive_field_updates(self):
        dto = UpdateWechatAccountRequest.from_data({"appSecret": APP_SECRET, "name": "Renamed"})
        assert dto.sensitive_field_updates() == {
            "appSecret": {"updated": True, "value": APP_SECRET, "isValid": True}
        }
        assert dto.to_dict()["updatedFields"] == ["name", "appSecret"]


class TestAccountOut:
    def test_secrets_masked_on_output(self):
        out = WechatAccountOut(
            id="abc",
            name="Newsroom",
            app_id=APP_ID,
            app_secret=APP_SECRET,
            is_active=True,
            token="tok",
            encoding_aes_key=AES_KEY,
            has_encryption=True,
            created_at=datetime(2024, 1, 1),
            updated_at=datetime(2024, 1, 1),
        )
        dumped = out.model_dump(mode="json", by_alias=True)
        assert dumped["appSecret"] == "01234567****"
        assert dumped["encodingAESKey"] == "AAAAAAAA****"
        assert dumped["appId"] == APP_ID

    def test_mask_secret_passes_empty_values(self):
        assert mask_secret(None) is None
        assert mask_secret("") == ""
