from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Literal, Optional

from ..errors import PaymentNotEligibleError, RequestFailedError
from ..models import (
    EligibilityResult,
    FundingInstruments,
    Identity,
    Person,
    PaymentRequest,
    StoriesPage,
    Story,
)
from ..util.money import cents_to_money_str
from .auth import AuthHandshake
from .endpoints import USER_AGENT, VenmoEndpoints
from .graphql import GraphQLClient, GraphQLExecutor
from .headers import session_headers
from .queries import (
    FUNDING_INSTRUMENTS_OPERATION,
    FUNDING_INSTRUMENTS_QUERY,
    PEOPLE_OPERATION,
    PEOPLE_QUERY,
)
from .session import CredentialSet, DeviceIdentity, HandshakeState, SessionState
from .transport import AiohttpTransport, HttpResponse, Transport


logger = logging.getLogger(__name__)

FeedType = Literal["me", "friend"]
PaymentAction = Literal["pay", "request"]

# Header the GraphQL gateway uses to identify the web client.
_GRAPHQL_CLIENT_ID = "10"
_BODY_SNIPPET_CHARS = 2000


class VenmoClient:
    """
    Authenticated access to the Venmo web app's private API.

    - `login()` runs the MFA handshake and fills the session.
    - Every other call checks the session first and fails locally (no request) when it is incomplete.
    - One client = one device id + one session. The device id is renewed only when a failed login is retried.
      Use separate instances for separate accounts; calls on a single instance are expected to be made sequentially.
    """

    def __init__(
        self,
        credentials: CredentialSet,
        *,
        transport: Optional[Transport] = None,
        graphql: Optional[GraphQLExecutor] = None,
        user_agent: str = USER_AGENT,
        timeout: int = 30,
        eager_device_correlation: bool = False,
    ) -> None:
        self._credentials = credentials
        self._user_agent = user_agent
        self._transport: Transport = transport or AiohttpTransport(timeout=timeout)
        self._graphql: GraphQLExecutor = graphql or GraphQLClient(timeout=timeout)

        self.session = SessionState()
        self._handshake = AuthHandshake(
            credentials=credentials,
            device=DeviceIdentity.generate(),
            session=self.session,
            transport=self._transport,
            user_agent=user_agent,
            eager_device_correlation=eager_device_correlation,
        )

    @property
    def device(self) -> DeviceIdentity:
        # Replaced by the handshake when a login is retried after a failure.
        return self._handshake.device

    @property
    def state(self) -> HandshakeState:
        return self._handshake.state

    async def login(self) -> str:
        return await self._handshake.login()

    def _headers(self, *, csrf: bool = False, json_body: bool = False) -> Dict[str, str]:
        return session_headers(self.device, self.session, self._user_agent, csrf=csrf, json_body=json_body)

    def _graphql_headers(self, *, include_device: bool) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.session.access_token}",
            "user-agent": self._user_agent,
        }
        if include_device:
            headers["Venmo-Client-Id"] = _GRAPHQL_CLIENT_ID
            headers["Venmo-Device-Id"] = self.device.id
        return headers

    def _raise_for_status(self, operation: str, resp: HttpResponse) -> None:
        if not resp.ok:
            logger.debug("%s failed (status=%d) body=%s", operation, resp.status, resp.text[:_BODY_SNIPPET_CHARS])
            raise RequestFailedError(operation, resp.status, resp.text[:_BODY_SNIPPET_CHARS])

    def _json(self, operation: str, resp: HttpResponse) -> Any:
        self._raise_for_status(operation, resp)
        try:
            return resp.json()
        except ValueError as e:
            raise RequestFailedError(operation, resp.status, resp.text[:_BODY_SNIPPET_CHARS]) from e

    async def get_identities(self) -> List[Identity]:
        """
        All identities on the account (personal, plus a business profile if there is one).
        """
        self.session.require_authenticated("get_identities")
        resp = await self._transport.request("GET", VenmoEndpoints.identities(), headers=self._headers())
        data = self._json("get_identities", resp)
        return [Identity.model_validate(d) for d in (data or [])]

    async def get_stories(self, feed_type: FeedType, external_id: str, *, next_id: Optional[str] = None) -> StoriesPage:
        """
        One page of the transaction feed, newest first.

        Pass the returned `next_id` back in to continue with older stories.
        """
        self.session.require_authenticated("get_stories")
        params = {"feedType": feed_type, "externalId": external_id}
        if next_id:
            params["nextId"] = next_id
        resp = await self._transport.request("GET", VenmoEndpoints.stories(), headers=self._headers(), params=params)
        return StoriesPage.model_validate(self._json("get_stories", resp) or {})

    async def iter_stories(
        self,
        feed_type: FeedType,
        external_id: str,
        *,
        max_pages: int = 5,
    ) -> AsyncIterator[Story]:
        next_id: Optional[str] = None
        for _ in range(max(1, int(max_pages or 0))):
            page = await self.get_stories(feed_type, external_id, next_id=next_id)
            for story in page.stories:
                yield story
            if not page.next_id or page.next_id == next_id:
                return
            next_id = page.next_id

    async def get_eligibility(
        self,
        target_user_id: str,
        amount_in_cents: int,
        action: PaymentAction,
        note: str,
    ) -> EligibilityResult:
        """
        Pre-payment check. Returns whether the transfer is allowed plus a single-use eligibility token.

        Call it with exactly the target/amount/action/note you are about to pay: the token is bound to them.
        A refusal comes back as `eligible=False`, not as an exception.
        """
        self.session.require_authenticated("get_eligibility")
        resp = await self._transport.request(
            "POST",
            VenmoEndpoints.eligibility(),
            headers=self._headers(csrf=True, json_body=True),
            json_body={
                "targetType": "user_id",
                "targetId": target_user_id,
                "amountInCents": int(amount_in_cents),
                "action": action,
                "note": note,
            },
        )
        result = EligibilityResult.model_validate(self._json("get_eligibility", resp) or {})
        logger.info(
            "Eligibility target=%s amount=%s action=%s -> eligible=%s",
            target_user_id,
            cents_to_money_str(amount_in_cents),
            action,
            result.eligible,
        )
        return result

    async def get_funding_instruments(self) -> FundingInstruments:
        self.session.require_authenticated("get_funding_instruments")
        data = await self._graphql.execute(
            FUNDING_INSTRUMENTS_OPERATION,
            FUNDING_INSTRUMENTS_QUERY,
            variables={},
            headers=self._graphql_headers(include_device=True),
        )
        return FundingInstruments.from_graphql(data)

    async def get_person(self, search_term: str) -> Optional[Person]:
        """
        First people-search hit for a name or @handle, or None when nothing matches.
        """
        self.session.require_authenticated("get_person")
        data = await self._graphql.execute(
            PEOPLE_OPERATION,
            PEOPLE_QUERY,
            variables={"input": {"name": search_term}},
            headers=self._graphql_headers(include_device=False),
        )
        edges = (((data or {}).get("search") or {}).get("people") or {}).get("edges") or []
        for edge in edges:
            node = (edge or {}).get("node")
            if node:
                return Person.model_validate(node)
        return None

    async def pay(self, request: PaymentRequest) -> None:
        """
        Submit a payment or charge request.

        The endpoint answers with an empty body; a 2xx status is the only success signal. Confirm the result
        with `get_stories()` if you need to.
        """
        self.session.require_authenticated("pay")
        if not self.session.device_correlation_cookie:
            await self._handshake.acquire_device_correlation()

        logger.info(
            "Submitting %s target=%s amount=%s audience=%s",
            request.type,
            request.target_user_id,
            cents_to_money_str(request.amount_in_cents),
            request.audience,
        )
        resp = await self._transport.request(
            "POST",
            VenmoEndpoints.payments(),
            headers=self._headers(csrf=True, json_body=True),
            json_body=request.to_payload(),
        )
        self._raise_for_status("pay", resp)

    async def send_payment(
        self,
        *,
        target_user_id: str,
        amount_in_cents: int,
        note: str,
        funding_source_id: str,
        type: PaymentAction = "pay",
        audience: Literal["private", "friends", "public"] = "private",
    ) -> EligibilityResult:
        """
        Eligibility check + payment with the token it returned, using the same target/amount/type/note for both.
        """
        eligibility = await self.get_eligibility(target_user_id, amount_in_cents, type, note)
        if not eligibility.eligible or not eligibility.eligibility_token:
            raise PaymentNotEligibleError(
                f"{type} of {cents_to_money_str(amount_in_cents)} to {target_user_id} is not eligible"
            )

        await self.pay(
            PaymentRequest(
                target_user_id=target_user_id,
                amount_in_cents=amount_in_cents,
                note=note,
                type=type,
                audience=audience,
                funding_source_id=funding_source_id,
                eligibility_token=eligibility.eligibility_token,
            )
        )
        return eligibility
