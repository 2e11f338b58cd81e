"""Managed account repository: cached manager customers / pages and their ad accounts."""

from dataclasses import asdict

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.application.dtos.connection import AdAccountResult, ManagedAccountResult
from app.application.dtos.provider import (
    AdAccountData,
    CampaignGroupData,
    ManagedAccountData,
)
from app.infrastructure.persistence.models.managed_account import (
    AdAccount,
    CampaignGroup,
    ManagedAccount,
)
from app.infrastructure.persistence.repositories.base import BaseRepository

# ManagedAccountData fields stored as columns of the same name.
_ACCOUNT_COLUMNS = (
    "name",
    "urn",
    "role",
    "vanity_name",
    "website_url",
    "description",
    "logo_urn",
    "logo_url",
    "cover_photo_urn",
    "cover_photo_url",
    "currency_code",
    "time_zone",
    "staff_count_range",
    "specialties",
    "address",
)


def _group_to_data(g: CampaignGroup) -> CampaignGroupData:
    return CampaignGroupData(
        external_id=g.external_id,
        urn=g.urn,
        name=g.name,
        account_urn=g.account_urn,
        status=g.status,
        objective_type=g.objective_type,
        test=g.test,
        backfilled=g.backfilled,
        run_schedule=g.run_schedule,
        total_budget=g.total_budget,
        serving_statuses=list(g.serving_statuses or []),
    )


def _ad_account_to_result(a: AdAccount) -> AdAccountResult:
    return AdAccountResult(
        id=a.id,
        external_id=a.external_id,
        name=a.name,
        urn=a.urn,
        role=a.role,
        status=a.status,
        currency_code=a.currency_code,
        campaign_groups=[_group_to_data(g) for g in a.campaign_groups],
    )


def _managed_to_result(
    m: ManagedAccount, *, with_children: bool = True
) -> ManagedAccountResult:
    """Map ORM ManagedAccount (children eager-loaded when with_children) to a DTO."""
    account = ManagedAccountData(
        external_account_id=m.external_account_id,
        **{col: getattr(m, col) for col in _ACCOUNT_COLUMNS},
    )
    return ManagedAccountResult(
        id=m.id,
        organization_id=m.organization_id,
        platform_id=m.platform_id,
        account=account,
        ad_accounts=[_ad_account_to_result(a) for a in m.ad_accounts]
        if with_children
        else [],
        updated_at=m.updated_at,
    )


def _with_children():
    return (
        selectinload(ManagedAccount.ad_accounts).selectinload(AdAccount.campaign_groups),
    )


class ManagedAccountRepository(BaseRepository[ManagedAccount]):
    """Managed accounts keyed by (organization_id, external_account_id)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ManagedAccount)

    async def _get_entity(
        self, organization_id: str, external_account_id: str, *, children: bool = False
    ) -> ManagedAccount | None:
        stmt = select(ManagedAccount).where(
            and_(
                ManagedAccount.organization_id == organization_id,
                ManagedAccount.external_account_id == external_account_id,
            )
        )
        if children:
            stmt = stmt.options(*_with_children()).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        organization_id: str,
        platform_id: str,
        account: ManagedAccountData,
    ) -> ManagedAccountResult:
        values = {col: getattr(account, col) for col in _ACCOUNT_COLUMNS}
        values["name"] = values["name"] or ""
        values["specialties"] = list(values["specialties"] or [])
        row = await self._get_entity(organization_id, account.external_account_id)
        if row is None:
            row = await self.create(
                ManagedAccount(
                    organization_id=organization_id,
                    platform_id=platform_id,
                    external_account_id=account.external_account_id,
                    **values,
                )
            )
        else:
            row.platform_id = platform_id
            for col, value in values.items():
                setattr(row, col, value)
            row = await self.update(row)
        return _managed_to_result(row, with_children=False)

    async def get(
        self, organization_id: str, external_account_id: str
    ) -> ManagedAccountResult | None:
        row = await self._get_entity(organization_id, external_account_id, children=True)
        return _managed_to_result(row) if row else None

    async def list_for_platform(
        self, organization_id: str, platform_id: str
    ) -> list[ManagedAccountResult]:
        result = await self.db.execute(
            select(ManagedAccount)
            .where(
                and_(
                    ManagedAccount.organization_id == organization_id,
                    ManagedAccount.platform_id == platform_id,
                )
            )
            .options(*_with_children())
            .order_by(ManagedAccount.created_at)
            .execution_options(populate_existing=True)
        )
        return [_managed_to_result(m) for m in result.scalars().all()]

    async def delete(self, organization_id: str, external_account_id: str) -> bool:  # type: ignore[override]
        result = await self.db.execute(
            delete(ManagedAccount).where(
                and_(
                    ManagedAccount.organization_id == organization_id,
                    ManagedAccount.external_account_id == external_account_id,
                )
            )
        )
        return bool(result.rowcount)

    async def delete_for_platform(self, organization_id: str, platform_id: str) -> int:
        result = await self.db.execute(
            delete(ManagedAccount).where(
                and_(
                    ManagedAccount.organization_id == organization_id,
                    ManagedAccount.platform_id == platform_id,
                )
            )
        )
        return result.rowcount or 0

    async def upsert_ad_accounts(
        self, managed_account_id: str, ad_accounts: list[AdAccountData]
    ) -> dict[str, str]:
        if not ad_accounts:
            return {}
        result = await self.db.execute(
            select(AdAccount).where(
                and_(
                    AdAccount.managed_account_id == managed_account_id,
                    AdAccount.external_id.in_([a.external_id for a in ad_accounts]),
                )
            )
        )
        existing = {a.external_id: a for a in result.scalars().all()}
        for data in ad_accounts:
            values = asdict(data)
            row = existing.get(data.external_id)
            if row is None:
                row = AdAccount(managed_account_id=managed_account_id, **values)
                self.db.add(row)
                existing[data.external_id] = row
            else:
                for key, value in values.items():
                    setattr(row, key, value)
        await self.db.flush()
        return {ext: row.id for ext, row in existing.items()}

    async def upsert_campaign_groups(
        self, ad_account_id: str, groups: list[CampaignGroupData]
    ) -> int:
        if not groups:
            return 0
        result = await self.db.execute(
            select(CampaignGroup).where(
                and_(
                    CampaignGroup.ad_account_id == ad_account_id,
                    CampaignGroup.external_id.in_([g.external_id for g in groups]),
                )
            )
        )
        existing = {g.external_id: g for g in result.scalars().all()}
        for data in groups:
            values = asdict(data)
            row = existing.get(data.external_id)
            if row is None:
                self.db.add(CampaignGroup(ad_account_id=ad_account_id, **values))
            else:
                for key, value in values.items():
                    setattr(row, key, value)
        await self.db.flush()
        return len(groups)
