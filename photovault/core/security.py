"""Bearer token verification against the identity provider's published keys."""
from typing import Callable, Optional, Dict, Any, List
import logging
import threading
import time

import httpx
from jose import JWTError, ExpiredSignatureError, jwt

from photovault.app.config import settings
from photovault.app.exceptions import Unauthenticated, UpstreamUnavailable
from photovault.core.cache import TTLCache, build_cache_key, CACHE_PREFIX_JWKS

logger = logging.getLogger(__name__)

ALGORITHMS = ["RS256"]


class TokenVerifier:
    """
    Verifies RS256 access tokens issued by an Auth0-style provider.

    The signing key set is fetched from the provider's JWKS endpoint and
    kept in a TTL cache. A token signed with a key id that is not in the
    cached set triggers a single refetch, which covers key rotation. Forced
    refetches are spaced at least `min_refresh_interval` seconds apart.
    """

    def __init__(
        self,
        domain: str,
        audience: str,
        http_client: Optional[httpx.Client] = None,
        cache: Optional[TTLCache] = None,
        jwks_ttl: int = 600,
        timeout: float = 5.0,
        min_refresh_interval: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.domain = domain
        self.audience = audience
        self.issuer = f"https://{domain}/"
        self.jwks_url = f"https://{domain}/.well-known/jwks.json"
        self.userinfo_url = f"https://{domain}/userinfo"
        self.jwks_ttl = jwks_ttl
        self.http = http_client or httpx.Client(timeout=timeout)
        self.cache = cache or TTLCache(default_ttl=jwks_ttl)
        self.min_refresh_interval = min_refresh_interval
        self._clock = clock
        self._refresh_lock = threading.Lock()
        self._last_forced_refresh: Optional[float] = None

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, audience, issuer and expiry.

        Args:
            token: Raw bearer token

        Returns:
            Verified claims

        Raises:
            Unauthenticated: token malformed, expired, or not signed by the provider
            UpstreamUnavailable: key set could not be fetched
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise Unauthenticated("Malformed token")

        kid = header.get("kid")
        if not kid:
            raise Unauthenticated("Token has no key id")
        if header.get("alg") not in ALGORITHMS:
            raise Unauthenticated("Unsupported token algorithm")

        key = self._find_key(kid)
        if key is None:
            raise Unauthenticated("Unknown signing key")

        try:
            return jwt.decode(
                token,
                key,
                algorithms=ALGORITHMS,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_at_hash": False},
            )
        except ExpiredSignatureError:
            raise Unauthenticated("Token expired")
        except JWTError as e:
            logger.info(f"Token rejected: {e}")
            raise Unauthenticated("Invalid token")

    def fetch_userinfo(self, token: str) -> Dict[str, Any]:
        """
        Fetch the profile for a token from the provider's `/userinfo` endpoint.

        Raises:
            Unauthenticated: provider rejected the token
            UpstreamUnavailable: provider unreachable or erroring
        """
        try:
            response = self.http.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Userinfo request failed: {e}")
            raise UpstreamUnavailable("Identity provider unavailable", detail=str(e))

        if response.status_code in (401, 403):
            raise Unauthenticated("Identity provider rejected token")
        if response.status_code >= 400:
            logger.error(f"Userinfo request returned {response.status_code}")
            raise UpstreamUnavailable("Identity provider unavailable", detail=f"userinfo status {response.status_code}")

        return response.json()

    def _find_key(self, kid: str) -> Optional[Dict[str, Any]]:
        key = _match_kid(self._get_jwks(), kid)
        if key is None and self._may_force_refresh():
            logger.info(f"Signing key {kid} not in cached key set, refetching")
            key = _match_kid(self._get_jwks(force_refresh=True), kid)
        if key is None:
            logger.info(f"Signing key {kid} not found")
        return key

    def _may_force_refresh(self) -> bool:
        with self._refresh_lock:
            now = self._clock()
            if (
                self._last_forced_refresh is not None
                and now - self._last_forced_refresh < self.min_refresh_interval
            ):
                return False
            self._last_forced_refresh = now
            return True

    def _get_jwks(self, force_refresh: bool = False) -> List[Dict[str, Any]]:
        cache_key = build_cache_key(CACHE_PREFIX_JWKS, self.domain)
        if not force_refresh:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            response = self.http.get(self.jwks_url)
            response.raise_for_status()
            keys = response.json().get("keys", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch signing keys from {self.jwks_url}: {e}")
            raise UpstreamUnavailable("Identity provider unavailable", detail=str(e))

        self.cache.set(cache_key, keys, ttl=self.jwks_ttl)
        logger.debug(f"Cached {len(keys)} signing keys for {self.domain}")
        return keys


def _match_kid(keys: List[Dict[str, Any]], kid: str) -> Optional[Dict[str, Any]]:
    for key in keys:
        if key.get("kid") == kid:
            return key
    return None


def build_token_verifier() -> TokenVerifier:
    return TokenVerifier(
        domain=settings.AUTH0_DOMAIN,
        audience=settings.AUTH0_AUDIENCE,
        jwks_ttl=settings.JWKS_CACHE_TTL_SECONDS,
        timeout=settings.AUTH_HTTP_TIMEOUT_SECONDS,
        min_refresh_interval=settings.JWKS_MIN_REFRESH_SECONDS,
    )
