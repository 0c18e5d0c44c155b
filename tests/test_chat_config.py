"""Tests for per-tenant chat settings."""

import pytest

from faqdesk.core.errors import ValidationError
from faqdesk.services.chat_config_service import (
    DEFAULT_SYSTEM_PROMPT,
    ChatSettings,
    get_chat_settings,
    update_chat_settings,
)


async def test_defaults_when_nothing_stored(db, tenant):
    assert await get_chat_settings(db, tenant.id) == ChatSettings()


async def test_update_only_given_fields(db, tenant):
    await update_chat_settings(db, tenant.id, {"headerText": "무엇이든 물어보세요"})
    result = await update_chat_settings(db, tenant.id, {"systemPrompt": "당신은 친절한 상담원입니다."})

    assert result.headerText == "무엇이든 물어보세요"
    assert result.systemPrompt == "당신은 친절한 상담원입니다."
    assert result.thumbnailUrl == ChatSettings().thumbnailUrl


async def test_upsert_overwrites(db, tenant):
    await update_chat_settings(db, tenant.id, {"headerText": "첫번째"})
    result = await update_chat_settings(db, tenant.id, {"headerText": "두번째"})
    assert result.headerText == "두번째"


async def test_blank_prompt_falls_back_to_default(db, tenant):
    result = await update_chat_settings(db, tenant.id, {"systemPrompt": "   "})
    assert result.systemPrompt == DEFAULT_SYSTEM_PROMPT


@pytest.mark.parametrize("payload", [{}, {"unknown": "x"}, {"headerText": 3}])
async def test_empty_update_rejected(db, tenant, payload):
    with pytest.raises(ValidationError):
        await update_chat_settings(db, tenant.id, payload)


async def test_settings_are_tenant_scoped(db, tenant, other_tenant):
    await update_chat_settings(db, tenant.id, {"headerText": "A 채널"})
    other = await get_chat_settings(db, other_tenant.id)
    assert other.headerText == ChatSettings().headerText
