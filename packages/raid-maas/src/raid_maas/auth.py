"""
MAAS request signing.

MAAS authenticates API requests with OAuth 1.0 using the PLAINTEXT
signature method. The API key issued by MAAS has the form
"consumer_key:token_key:token_secret"; the consumer secret is empty, so
the signature is "&<token_secret>". Nonce and timestamp are generated per
request.
"""

import time
import uuid
from collections.abc import Generator

import httpx


class MAASAuth(httpx.Auth):
    """
    httpx auth flow adding the MAAS OAuth header to every request.

    Example:
        auth = MAASAuth("consumer", "token", "secret")
        http = httpx.AsyncClient(base_url=base_url, auth=auth)
    """

    def __init__(self, consumer_key: str, token_key: str, token_secret: str) -> None:
        self.consumer_key = consumer_key
        self.token_key = token_key
        self.token_secret = token_secret

    def authorization_header(self) -> str:
        params = {
            "oauth_version": "1.0",
            "oauth_signature_method": "PLAINTEXT",
            "oauth_consumer_key": self.consumer_key,
            "oauth_token": self.token_key,
            "oauth_signature": f"&{self.token_secret}",
            "oauth_nonce": uuid.uuid4().hex,
            "oauth_timestamp": str(int(time.time())),
        }
        return "OAuth " + ", ".join(f'{k}="{v}"' for k, v in params.items())

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self.authorization_header()
        yield request
