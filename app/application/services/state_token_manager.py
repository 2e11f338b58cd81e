"""State token manager: CSRF state and staged selections held in the caller's session.

Nothing here is persisted beyond the session; expiry is the session's TTL.
"""

from __future__ import annotations

import hmac
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.application.dtos.connection import AuthorizationFlow, StagedSelection
from app.application.dtos.provider import ManagedAccountData
from app.domain.enums import ProviderName
from app.domain.exceptions import DecryptionError, InvalidState, NotFound
from app.domain.value_objects import TokenSet
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock, SystemClock
from app.shared.utils.generators import generate_nonce

if TYPE_CHECKING:
    from app.application.interfaces.services import ISecretCodec, IStateSigner
    from app.application.interfaces.session import ISession

logger = get_logger(__name__)


def _flow_key(provider: ProviderName) -> str:
    return f"oauth:flow:{provider.value}"


def _selection_key(provider: ProviderName) -> str:
    return f"oauth:selection:{provider.value}"


class StateTokenManager:
    """Issue/validate single-use state tokens and stage pending selections per session."""

    def __init__(
        self,
        signer: IStateSigner,
        codec: ISecretCodec,
        clock: Clock | None = None,
    ) -> None:
        self.signer = signer
        self.codec = codec
        self.clock = clock or SystemClock()

    async def begin_flow(
        self,
        session: ISession,
        provider: ProviderName,
        user_id: str | None = None,
    ) -> str:
        """Start an authorization flow and return the state value for the consent URL.

        Starting a new flow replaces any pending one for the same provider.
        """
        state = self.signer.sign(generate_nonce())
        await session.set(
            _flow_key(provider),
            {
                "state": state,
                "user_id": user_id,
                "created_at": self.clock.now().isoformat(),
            },
        )
        return state

    async def validate_flow(
        self,
        session: ISession,
        provider: ProviderName,
        presented_state: str | None,
    ) -> AuthorizationFlow:
        """Check presented_state against the session and consume the flow.

        Raises:
            InvalidState: No flow was begun, the state is missing, forged or different.
        """
        stored = await session.get(_flow_key(provider))
        if not stored or not isinstance(stored, dict) or not stored.get("state"):
            logger.warning("OAuth callback for %s without a pending flow", provider.value)
            raise InvalidState("No authorization flow in progress for this session")
        if not presented_state:
            raise InvalidState("Missing OAuth state")
        try:
            self.signer.verify(presented_state)
        except ValueError as e:
            logger.warning("OAuth state signature check failed for %s", provider.value)
            raise InvalidState() from e
        if not hmac.compare_digest(str(stored["state"]), presented_state):
            logger.warning("OAuth state mismatch for %s", provider.value)
            raise InvalidState()
        await session.delete(_flow_key(provider))
        return AuthorizationFlow(
            provider=provider,
            state=presented_state,
            user_id=stored.get("user_id"),
            created_at=datetime.fromisoformat(stored["created_at"]),
        )

    async def stage_selection(
        self,
        session: ISession,
        provider: ProviderName,
        candidates: list[ManagedAccountData],
        token_set: TokenSet,
        user_id: str | None = None,
    ) -> None:
        """Hold candidates and the grant that produced them until the user picks one."""
        await session.set(
            _selection_key(provider),
            {
                "candidates": [c.to_dict() for c in candidates],
                "access_token": self.codec.encrypt(token_set.access_token),
                "refresh_token": self.codec.encrypt_optional(token_set.refresh_token),
                "expires_at": token_set.expires_at.isoformat(),
                "scopes": list(token_set.scopes),
                "user_id": user_id,
            },
        )

    async def list_staged(
        self, session: ISession, provider: ProviderName
    ) -> list[ManagedAccountData]:
        """Return staged candidates without consuming them (empty when none)."""
        staged = await session.get(_selection_key(provider))
        if not staged:
            return []
        return [ManagedAccountData.from_dict(c) for c in staged.get("candidates", [])]

    async def take_selection(
        self,
        session: ISession,
        provider: ProviderName,
        chosen_id: str,
    ) -> StagedSelection:
        """Return the chosen candidate and its grant, then drop the staged list.

        Raises:
            NotFound: Nothing staged, or chosen_id is not among the candidates.
        """
        staged: dict[str, Any] | None = await session.get(_selection_key(provider))
        if not staged:
            raise NotFound("staged_selection")
        candidate = next(
            (
                ManagedAccountData.from_dict(c)
                for c in staged.get("candidates", [])
                if str(c.get("external_account_id")) == str(chosen_id)
            ),
            None,
        )
        if candidate is None:
            raise NotFound("managed_account", chosen_id)
        try:
            token_set = TokenSet(
                access_token=self.codec.decrypt(staged["access_token"]),
                refresh_token=self.codec.decrypt_optional(staged.get("refresh_token")),
                expires_at=datetime.fromisoformat(staged["expires_at"]),
                scopes=tuple(staged.get("scopes") or ()),
            )
        except (DecryptionError, KeyError) as e:
            await session.delete(_selection_key(provider))
            raise InvalidState("Staged authorization is corrupted; start again") from e
        await session.delete(_selection_key(provider))
        return StagedSelection(
            provider=provider,
            candidate=candidate,
            token_set=token_set,
            user_id=staged.get("user_id"),
        )

    async def clear(self, session: ISession, provider: ProviderName | None = None) -> None:
        """Drop pending flow and staged selection (one provider, or all)."""
        providers = [provider] if provider else list(ProviderName)
        for p in providers:
            await session.delete(_flow_key(p))
            await session.delete(_selection_key(p))
