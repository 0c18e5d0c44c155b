"""Tests for the transcript -> FAQ generation pipeline."""

import json

import pytest
from sqlalchemy import func, select

from faqdesk.core.errors import LlmError, StorageError, ValidationError
from faqdesk.models.faq import FAQArticle
from faqdesk.models.faq_category import Category
from faqdesk.services import faq_extraction, faq_service
from faqdesk.services.faq_service import count_faqs, filter_by_confidence, generate_faqs
from faqdesk.services.faq_extraction import FAQCandidate
from faqdesk.services.llm_client import LLMClient
from tests.fakes.factories import make_settings

RAW_TEXT = """
고객: 배송은 얼마나 걸려요? / 주말에도 배송되나요?
상담원: 보통 1~3일 소요되며 주말에는 배송이 없습니다.
고객: 환불은 어떻게 하나요?
상담원: 마이페이지 > 주문내역에서 환불 신청이 가능합니다.
"""


def _payload(items) -> str:
    return json.dumps(items, ensure_ascii=False)


async def _add_faq(db, tenant_id, title="기존 질문", content="기존 답변", category=None):
    row = FAQArticle(tenant_id=tenant_id, title=title, content=content, category=category, media=[])
    db.add(row)
    await db.commit()
    return row


@pytest.mark.parametrize("raw_text", ["", "   \n\t", None])
async def test_blank_input_rejected_without_llm_call(db, tenant, llm, fake_llm, settings, raw_text):
    with pytest.raises(ValidationError) as exc:
        await generate_faqs(db, tenant.id, raw_text, llm=llm, settings=settings)
    assert exc.value.stage == "validating"
    assert fake_llm.calls == []


async def test_empty_extraction_leaves_storage_untouched(db, tenant, llm, fake_llm, settings):
    await _add_faq(db, tenant.id)
    fake_llm.content = "[]"

    result = await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=settings)

    assert result.added_count == 0
    assert result.items == []
    assert result.skipped_duplicates == 0
    assert result.total_after == 1
    assert await count_faqs(db, tenant.id) == 1


async def test_all_below_threshold_persists_nothing(db, tenant, llm, fake_llm):
    await _add_faq(db, tenant.id)
    fake_llm.content = _payload(
        [
            {"question": "Q1", "answer": "A1", "confidence": 0.5},
            {"question": "Q2", "answer": "A2", "confidence": 0.3},
        ]
    )
    strict = make_settings(LLM_CONFIDENCE_THRESHOLD=0.7)

    result = await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=strict)

    assert result.added_count == 0
    assert result.total_after == 1
    assert await count_faqs(db, tenant.id) == 1


async def test_generates_and_persists_in_extraction_order(db, tenant, llm, fake_llm, settings):
    db.add(Category(tenant_id=tenant.id, name="배송"))
    await db.commit()
    fake_llm.content = _payload(
        [
            {"question": "배송은 얼마나 걸려요?", "answer": "보통 1~3일 소요됩니다.", "category": "배송 문의", "confidence": 0.9},
            {"question": "주말에도 배송되나요?", "answer": "주말에는 배송이 없습니다.", "category": "배송", "confidence": 0},
            {"question": "환불은 어떻게 하나요?", "answer": "마이페이지에서 신청하세요.", "category": "환불"},
        ]
    )

    result = await generate_faqs(db, tenant.id, RAW_TEXT, "기타", llm=llm, settings=settings)

    assert result.added_count == 3
    assert result.total_after == 3
    assert [r.title for r in result.items] == ["배송은 얼마나 걸려요?", "주말에도 배송되나요?", "환불은 어떻게 하나요?"]

    first, second, third = result.items
    # near-duplicate label collapses onto the stored category
    assert (first.category, first.category_id) == ("배송", second.category_id)
    assert first.category_id is not None
    assert second.confidence == 0.6
    # no similar category: free-text label, no category row created
    assert (third.category, third.category_id) == ("환불", None)
    assert third.confidence is None
    assert all(r.source_type == "llm_import" for r in result.items)
    assert all(r.tenant_id == tenant.id for r in result.items)

    cat_count = await db.execute(select(func.count()).select_from(Category))
    assert cat_count.scalar_one() == 1


async def test_extraction_prompt_contains_raw_text(db, tenant, llm, fake_llm, settings):
    fake_llm.content = "[]"
    await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=settings)
    assert len(fake_llm.calls) == 1
    user_turn = fake_llm.last_messages[1]["content"]
    assert "환불은 어떻게 하나요?" in user_turn


async def test_null_confidence_survives_threshold(db, tenant, llm, fake_llm):
    fake_llm.content = _payload(
        [
            {"question": "Q1", "answer": "A1"},
            {"question": "Q2", "answer": "A2", "confidence": 0.95},
            {"question": "Q3", "answer": "A3", "confidence": 0.2},
        ]
    )
    result = await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=make_settings(LLM_CONFIDENCE_THRESHOLD=0.5))
    assert [r.title for r in result.items] == ["Q1", "Q2"]


async def test_single_object_response_is_wrapped(db, tenant, llm, fake_llm, settings):
    fake_llm.content = _payload({"question": "단일 질문", "answer": "단일 답변"})
    result = await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=settings)
    assert result.added_count == 1
    assert result.items[0].category == "일반"


async def test_default_category_used_when_missing(db, tenant, llm, fake_llm, settings):
    fake_llm.content = _payload({"items": [{"question": "Q", "answer": "A"}]})
    result = await generate_faqs(db, tenant.id, RAW_TEXT, "결제", llm=llm, settings=settings)
    assert result.items[0].category == "결제"


@pytest.mark.parametrize("content", ['{"error": "bad format"}', "not json at all", '"text"'])
async def test_bad_shape_is_fatal(db, tenant, llm, fake_llm, settings, content):
    fake_llm.content = content
    with pytest.raises(LlmError) as exc:
        await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=settings)
    assert exc.value.status == 502
    assert exc.value.stage == "extracting"
    assert await count_faqs(db, tenant.id) == 0


async def test_missing_credentials_fail_fast(db, tenant, fake_llm):
    no_key = make_settings(OPENAI_API_KEY=None)
    client = LLMClient(no_key, client_factory=fake_llm.factory)
    with pytest.raises(LlmError) as exc:
        await generate_faqs(db, tenant.id, RAW_TEXT, llm=client, settings=no_key)
    assert exc.value.status == 503
    assert fake_llm.calls == []


async def test_batch_insert_is_all_or_nothing(db, tenant, llm, fake_llm, settings, monkeypatch):
    tenant_id = tenant.id
    await _add_faq(db, tenant_id)
    fake_llm.content = _payload([{"question": f"Q{i}", "answer": f"A{i}"} for i in range(5)])

    def normalize_with_broken_last_row(raw_items, default_category=None):
        candidates = faq_extraction.normalize_faq_items(raw_items, default_category)
        # first four rows are valid, only the last one violates NOT NULL
        candidates[-1].title = None
        return candidates

    monkeypatch.setattr(faq_service, "normalize_faq_items", normalize_with_broken_last_row)
    with pytest.raises(StorageError) as exc:
        await generate_faqs(db, tenant_id, RAW_TEXT, llm=llm, settings=settings)
    assert exc.value.stage == "persisting"

    assert await count_faqs(db, tenant_id) == 1
    titles = (await db.execute(select(FAQArticle.title).where(FAQArticle.tenant_id == tenant_id))).scalars().all()
    assert titles == ["기존 질문"]


async def test_one_unrepresentable_confidence_does_not_sink_batch(db, tenant, llm, fake_llm, settings):
    fake_llm.content = (
        '[{"question": "Q1", "answer": "A1", "confidence": ' + "9" * 400 + "},"
        ' {"question": "Q2", "answer": "A2", "confidence": 0.8}]'
    )

    result = await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=settings)

    assert result.added_count == 2
    assert [r.confidence for r in result.items] == [None, 0.8]


async def test_counts_are_tenant_scoped(db, tenant, other_tenant, llm, fake_llm, settings):
    await _add_faq(db, other_tenant.id)
    await _add_faq(db, other_tenant.id)
    fake_llm.content = _payload([{"question": "Q", "answer": "A"}])

    result = await generate_faqs(db, tenant.id, RAW_TEXT, llm=llm, settings=settings)

    assert result.total_after == 1
    assert await count_faqs(db, other_tenant.id) == 2


def test_filter_by_confidence_keeps_order():
    cands = [
        FAQCandidate(title="a", content="", category="일반", confidence=0.1),
        FAQCandidate(title="b", content="", category="일반", confidence=None),
        FAQCandidate(title="c", content="", category="일반", confidence=0.5),
    ]
    assert [c.title for c in filter_by_confidence(cands, 0.5)] == ["b", "c"]
    assert [c.title for c in filter_by_confidence(cands, 0.0)] == ["a", "b", "c"]
