"""Tests for template listing, moderation and demo bookkeeping."""

from decimal import Decimal

import pytest

from template_market.modules.templates import (
    TemplateCreateInput,
    TemplateNotFoundError,
    TemplatePatch,
    TemplatePermissionError,
    TemplateService,
    TemplateStatus,
    TemplateValidationError,
    normalize_price,
    normalize_tags,
)


@pytest.fixture
def service(session):
    return TemplateService.with_session(session)


async def _create(service, principal, **overrides):
    payload = TemplateCreateInput(title=overrides.pop("title", "Portfolio"), **overrides)
    return await service.create_template(payload, principal)


class TestNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [(None, "0.00"), ("", "0.00"), ("19.995", "20.00"), (5, "5.00"), ("0.004", "0.00")],
    )
    def test_price_rounds_half_up_to_cents(self, raw, expected):
        assert normalize_price(raw) == Decimal(expected)

    @pytest.mark.parametrize("raw", ["-1", "abc", "NaN", "Infinity"])
    def test_invalid_prices(self, raw):
        with pytest.raises(TemplateValidationError):
            normalize_price(raw)

    def test_tags_are_trimmed_and_blank_dropped(self):
        assert normalize_tags([" react ", "", "  ", "vue"]) == ["react", "vue"]


class TestCreate:
    @pytest.mark.asyncio
    async def test_user_submission_is_pending(self, service, owner):
        template = await _create(service, owner, price="12.345", tags=[" ui "])

        assert template.status is TemplateStatus.PENDING
        assert template.price == Decimal("12.35")
        assert template.tags == ["ui"]
        assert template.created_by == owner.account_id
        assert not template.has_live_demo
        assert template.demo_url is None

    @pytest.mark.asyncio
    async def test_admin_submission_is_published(self, service, admin):
        template = await _create(service, admin)
        assert template.status is TemplateStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_blank_title_is_rejected(self, service, owner):
        with pytest.raises(TemplateValidationError):
            await _create(service, owner, title="   ")


class TestLookup:
    @pytest.mark.asyncio
    async def test_invalid_id_is_not_found(self, service):
        with pytest.raises(TemplateNotFoundError):
            await service.get_template("not-a-uuid")

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, service):
        with pytest.raises(TemplateNotFoundError):
            await service.get_template("00000000-0000-0000-0000-000000000000")

    @pytest.mark.asyncio
    async def test_search_filters_and_pages(self, service, admin, owner):
        await _create(service, admin, title="React Dashboard", category="admin")
        await _create(service, admin, title="Vue Shop", category="shop")
        await _create(service, admin, title="Plain Blog", description="react-free", category="blog")
        await _create(service, owner, title="React Pending")

        page = await service.list_templates(status=TemplateStatus.PUBLISHED, search="react")
        assert page.total == 2
        assert {item.title for item in page.items} == {"React Dashboard", "Plain Blog"}

        page = await service.list_templates(status=TemplateStatus.PUBLISHED, category="shop")
        assert [item.title for item in page.items] == ["Vue Shop"]

        page = await service.list_templates(status=TemplateStatus.PUBLISHED, page=2, page_size=2)
        assert page.total == 3
        assert len(page.items) == 1

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, service, admin):
        await _create(service, admin, title="100% Responsive")
        await _create(service, admin, title="Responsive")

        page = await service.list_templates(search="100%")
        assert [item.title for item in page.items] == ["100% Responsive"]

    @pytest.mark.asyncio
    async def test_page_size_is_capped(self, service):
        page = await service.list_templates(page=0, page_size=1000)
        assert page.page == 1
        assert page.page_size == 100

    @pytest.mark.asyncio
    async def test_list_by_owner_and_status(self, service, owner, stranger):
        mine = await _create(service, owner)
        await _create(service, stranger)

        assert [t.id for t in await service.list_by_owner(owner.account_id)] == [mine.id]
        assert len(await service.list_by_status(TemplateStatus.PENDING)) == 2


class TestModeration:
    @pytest.mark.asyncio
    async def test_admin_publishes_with_comment(self, service, owner, admin):
        template = await _create(service, owner)

        reviewed = await service.update_status(
            template.id, status=TemplateStatus.PUBLISHED, reviewer=admin, comment="Looks good"
        )

        assert reviewed.status is TemplateStatus.PUBLISHED
        assert reviewed.admin_comment == "Looks good"
        assert reviewed.reviewed_by == admin.account_id
        assert reviewed.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_non_admin_cannot_moderate(self, service, owner):
        template = await _create(service, owner)
        with pytest.raises(TemplatePermissionError):
            await service.update_status(template.id, status=TemplateStatus.PUBLISHED, reviewer=owner)


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_owner_updates_listing_fields(self, service, owner):
        template = await _create(service, owner)

        updated = await service.update_template(
            template.id, TemplatePatch(title="Portfolio Pro", price="9.999"), owner
        )

        assert updated.title == "Portfolio Pro"
        assert updated.price == Decimal("10.00")
        assert updated.description == template.description

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(self, service, owner, stranger):
        template = await _create(service, owner)
        with pytest.raises(TemplatePermissionError):
            await service.update_template(template.id, TemplatePatch(title="Mine now"), stranger)

    @pytest.mark.asyncio
    async def test_delete(self, service, owner):
        template = await _create(service, owner)
        await service.delete_template(template.id)
        with pytest.raises(TemplateNotFoundError):
            await service.get_template(template.id)
        with pytest.raises(TemplateNotFoundError):
            await service.delete_template(template.id)


class TestDemoFields:
    @pytest.mark.asyncio
    async def test_apply_then_clear(self, service, owner):
        template = await _create(service, owner)

        applied = await service.apply_demo(
            template.id, demo_url="https://demos.example.com/demo-1/index.html", deployment_id="demo-1"
        )
        assert applied.has_live_demo
        assert applied.demo_deployment_id == "demo-1"

        cleared = await service.clear_demo(template.id)
        assert not cleared.has_live_demo
        assert cleared.demo_url is None
        assert cleared.demo_deployment_id is None

    @pytest.mark.asyncio
    async def test_apply_requires_both_values(self, service, owner):
        template = await _create(service, owner)
        with pytest.raises(TemplateValidationError):
            await service.apply_demo(template.id, demo_url="", deployment_id="demo-1")

    @pytest.mark.asyncio
    async def test_apply_to_unknown_template(self, service):
        with pytest.raises(TemplateNotFoundError):
            await service.apply_demo(
                "00000000-0000-0000-0000-000000000000", demo_url="https://x/index.html", deployment_id="demo-2"
            )
