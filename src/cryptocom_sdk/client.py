"""
client.py – Unified CryptoComClient façade.

Single entry point that builds the credentials and the async REST client
from one set of constructor arguments, so the configuration seams (clock,
id generator, signature generator, HTTP session, base URL) are wired in
one place.

Usage
-----
    import asyncio
    from cryptocom_sdk import CryptoComClient, CryptoComEnv

    async def main() -> None:
        async with CryptoComClient(api_key="...", secret_key="...",
                                   env=CryptoComEnv.UAT) as client:
            book = await client.rest.get_book("BTC_USDT", depth=5)
            print(book.data[0].bids[0])
            await client.rest.cancel_all_orders("BTC_USDT")

    asyncio.run(main())
"""

from __future__ import annotations

from typing import Any, Optional, Union

import aiohttp

from .auth import Clock, CryptoComAuth, IDGenerator
from .rest import AsyncCryptoComRestClient
from .signing import SignatureGenerator
from .types import CryptoComEnv


class CryptoComClient:
    """
    Unified façade for the Crypto.com Exchange SDK.

    Parameters
    ----------
    api_key             : Crypto.com API key
    secret_key          : matching secret key
    env                 : CryptoComEnv.PRODUCTION / CryptoComEnv.UAT
    base_url            : overrides the environment URL, e.g. "http://127.0.0.1:8080/v2/"
    rest_timeout        : HTTP timeout in seconds for REST requests
    clock               : Callable returning Unix ms, used for nonces
    id_generator        : Callable returning a fresh request id
    signature_generator : Callable[[SignatureRequest], str]
    session             : aiohttp.ClientSession to reuse; never closed by
                          this client
    """

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        env: Union[CryptoComEnv, str] = CryptoComEnv.PRODUCTION,
        *,
        base_url: Optional[str] = None,
        rest_timeout: float = 10.0,
        clock: Optional[Clock] = None,
        id_generator: Optional[IDGenerator] = None,
        signature_generator: Optional[SignatureGenerator] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._auth = CryptoComAuth(
            api_key=api_key,
            secret_key=secret_key,
            env=env,
            base_url_override=base_url,
        )
        self.rest = AsyncCryptoComRestClient(
            self._auth,
            timeout=rest_timeout,
            clock=clock,
            id_generator=id_generator,
            signature_generator=signature_generator,
            session=session,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "CryptoComClient":
        """
        Build a client from CRYPTOCOM_* environment variables.

        Keyword arguments are passed to the constructor and take precedence,
        so ``base_url=`` overrides CRYPTOCOM_BASE_URL.
        """
        auth = CryptoComAuth.from_env()
        options: dict[str, Any] = {"base_url": auth.base_url_override, **kwargs}
        return cls(auth.api_key, auth.secret_key, auth.env, **options)

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "CryptoComClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the REST session if this client created it."""
        await self.rest.close()

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def auth(self) -> CryptoComAuth:
        return self._auth

    @property
    def env(self) -> Union[CryptoComEnv, str]:
        return self._auth.env

    @property
    def base_url(self) -> str:
        return self._auth.base_url
